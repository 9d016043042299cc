import pulumi
import pulumi_aws as aws
from typing import List

ANYWHERE_IPV4 = "0.0.0.0/0"
ANYWHERE_IPV6 = "::/0"


class SecurityGroup(pulumi.ComponentResource):
    """
    A reusable security group component that creates AWS security groups with configurable rules.
    """

    def __init__(self, name: str, args: dict, opts: pulumi.ResourceOptions = None):
        """
        Creates a security group with specified ingress and egress rules.

        Args:
            name: The unique name of the resource.
            args: Dictionary containing configuration options:
                - vpc_id: VPC ID where the security group will be created (required)
                - description: Description of the security group (optional)
                - ingress_rules: List of ingress rule dictionaries (optional)
                - egress_rules: List of egress rule dictionaries (optional)
                - tags: Dictionary of tags to apply (optional)
            opts: Additional resource options.
        """
        super().__init__("custom:security:SecurityGroup", name, {}, opts)

        vpc_id = args.get("vpc_id")
        if not vpc_id:
            raise ValueError("vpc_id is required")

        description = args.get("description", f"Security group for {name}")
        ingress_rules = args.get("ingress_rules", [])
        egress_rules = args.get("egress_rules", [])
        tags = args.get("tags", {})

        # Default egress rule: allow all outbound traffic
        if not egress_rules:
            egress_rules = [
                {
                    "protocol": "-1",
                    "from_port": 0,
                    "to_port": 0,
                    "cidr_blocks": [ANYWHERE_IPV4],
                    "description": "Allow all outbound traffic",
                }
            ]

        self.security_group = aws.ec2.SecurityGroup(
            f"{name}-sg",
            vpc_id=vpc_id,
            description=description,
            ingress=[aws.ec2.SecurityGroupIngressArgs(**self._rule_args(rule)) for rule in ingress_rules],
            egress=[aws.ec2.SecurityGroupEgressArgs(**self._rule_args(rule)) for rule in egress_rules],
            tags={**tags, "Name": name},
            opts=pulumi.ResourceOptions(parent=self),
        )

        # Register outputs
        self.register_outputs({
            "security_group_id": self.security_group.id,
            "security_group_name": self.security_group.name,
        })

    @staticmethod
    def _rule_args(rule: dict) -> dict:
        """
        Builds security group rule arguments from a dictionary.

        Args:
            rule: Dictionary containing rule configuration:
                - protocol: Protocol (tcp, udp, icmp, or -1 for all)
                - from_port: Start port
                - to_port: End port
                - cidr_blocks: List of CIDR blocks (optional)
                - ipv6_cidr_blocks: List of IPv6 CIDR blocks (optional)
                - description: Rule description (optional)
        """
        return {
            "protocol": rule.get("protocol", "tcp"),
            "from_port": rule.get("from_port", 0),
            "to_port": rule.get("to_port", 0),
            "cidr_blocks": rule.get("cidr_blocks", []),
            "ipv6_cidr_blocks": rule.get("ipv6_cidr_blocks", []),
            "description": rule.get("description", ""),
        }


def tcp_rule(port: int, description: str, cidr_blocks: List[str] = None) -> dict:
    return {
        "protocol": "tcp",
        "from_port": port,
        "to_port": port,
        "cidr_blocks": cidr_blocks or [ANYWHERE_IPV4],
        "description": description,
    }


class AppServerSecurityGroup(SecurityGroup):
    """
    Pre-configured security group for the application host: HTTPS, HTTP, SSH and the app port,
    all open to the internet, with unrestricted egress over IPv4 and IPv6.
    """

    def __init__(self, name: str, args: dict, opts: pulumi.ResourceOptions = None):
        """
        Args:
            name: The unique name of the resource.
            args: Dictionary containing configuration options:
                - vpc_id: VPC ID (required)
                - app_port: Port the application container listens on (default: 3000)
                - tags: Dictionary of tags to apply (optional)
        """
        app_port = args.get("app_port", 3000)

        args = {**args, "description": args.get("description", "EC2 Security Group")}
        args["ingress_rules"] = [
            tcp_rule(443, "Allow HTTPS"),
            tcp_rule(80, "Allow HTTP"),
            tcp_rule(22, "Allow SSH"),
            tcp_rule(app_port, f"Allow requests at {app_port}"),
        ]
        args["egress_rules"] = [
            {
                "protocol": "-1",
                "from_port": 0,
                "to_port": 0,
                "cidr_blocks": [ANYWHERE_IPV4],
                "ipv6_cidr_blocks": [ANYWHERE_IPV6],
                "description": "Allow all outbound traffic",
            }
        ]

        super().__init__(name, args, opts)
