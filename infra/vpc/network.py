import pulumi
import pulumi_aws as aws
from typing import List, Optional

DEFAULT_ROUTE_CIDR = "0.0.0.0/0"
PRIVATE_EGRESS_MODES = ("nat", "internet_gateway")


class VpcNetwork(pulumi.ComponentResource):
    """
    A two-subnet VPC component: one public and one private subnet, an internet gateway,
    a route table per subnet with a single default route, and the subnet associations.
    """

    def __init__(self, name: str, args: dict, opts: pulumi.ResourceOptions = None):
        """
        Creates a VPC with one public and one private subnet.

        Args:
            name: The unique name of the resource.
            args: Dictionary containing configuration options:
                - cidr_block: CIDR block for the VPC (default: "10.0.0.0/16")
                - instance_tenancy: Tenancy of instances launched in the VPC (default: "default")
                - public_subnet: Dict with cidr_block and availability_zone (default: 10.0.1.0/24)
                - private_subnet: Dict with cidr_block and availability_zone (default: 10.0.2.0/24)
                - private_egress: "nat" or "internet_gateway" (default: "nat")
                - enable_dns_hostnames: Enable DNS hostnames (default: True)
                - enable_dns_support: Enable DNS support (default: True)
                - tags: Dictionary of tags to apply (optional)
            opts: Additional resource options.
        """
        super().__init__("custom:network:VpcNetwork", name, {}, opts)

        # Get configuration with defaults
        cidr_block = args.get("cidr_block", "10.0.0.0/16")
        instance_tenancy = args.get("instance_tenancy", "default")
        public_subnet = args.get("public_subnet") or {}
        private_subnet = args.get("private_subnet") or {}
        private_egress = args.get("private_egress", "nat")
        enable_dns_hostnames = args.get("enable_dns_hostnames", True)
        enable_dns_support = args.get("enable_dns_support", True)
        tags = args.get("tags", {})

        if private_egress not in PRIVATE_EGRESS_MODES:
            raise ValueError(f"private_egress must be one of {PRIVATE_EGRESS_MODES}")

        public_cidr = public_subnet.get("cidr_block", "10.0.1.0/24")
        private_cidr = private_subnet.get("cidr_block", "10.0.2.0/24")
        public_az = public_subnet.get("availability_zone")
        private_az = private_subnet.get("availability_zone")

        # Fall back to the first available AZs when a subnet is not pinned
        if not public_az or not private_az:
            azs = aws.get_availability_zones(state="available")
            public_az = public_az or azs.names[0]
            private_az = private_az or azs.names[1 % len(azs.names)]

        # Create VPC
        self.vpc = aws.ec2.Vpc(
            f"{name}-vpc",
            cidr_block=cidr_block,
            instance_tenancy=instance_tenancy,
            enable_dns_hostnames=enable_dns_hostnames,
            enable_dns_support=enable_dns_support,
            tags={**tags, "Name": f"{name}-vpc"},
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.public_subnet = aws.ec2.Subnet(
            f"{name}-public-subnet",
            vpc_id=self.vpc.id,
            cidr_block=public_cidr,
            availability_zone=public_az,
            map_public_ip_on_launch=True,
            tags={**tags, "Name": f"{name}-public-subnet", "Type": "public"},
            opts=pulumi.ResourceOptions(parent=self.vpc),
        )

        self.private_subnet = aws.ec2.Subnet(
            f"{name}-private-subnet",
            vpc_id=self.vpc.id,
            cidr_block=private_cidr,
            availability_zone=private_az,
            map_public_ip_on_launch=False,
            tags={**tags, "Name": f"{name}-private-subnet", "Type": "private"},
            opts=pulumi.ResourceOptions(parent=self.vpc),
        )

        # Create Internet Gateway
        self.internet_gateway = aws.ec2.InternetGateway(
            f"{name}-igw",
            vpc_id=self.vpc.id,
            tags={**tags, "Name": f"{name}-igw"},
            opts=pulumi.ResourceOptions(parent=self.vpc),
        )

        self.public_route_table = aws.ec2.RouteTable(
            f"{name}-public-rt",
            vpc_id=self.vpc.id,
            routes=[
                aws.ec2.RouteTableRouteArgs(
                    cidr_block=DEFAULT_ROUTE_CIDR,
                    gateway_id=self.internet_gateway.id,
                ),
            ],
            tags={**tags, "Name": f"{name}-public-rt"},
            opts=pulumi.ResourceOptions(parent=self.vpc),
        )

        # NAT Gateway in the public subnet keeps the private subnet unreachable from outside
        self.nat_eip: Optional[aws.ec2.Eip] = None
        self.nat_gateway: Optional[aws.ec2.NatGateway] = None
        if private_egress == "nat":
            pulumi.log.info("private subnet egress goes through a NAT gateway", resource=self)
            self.nat_eip = aws.ec2.Eip(
                f"{name}-nat-eip",
                domain="vpc",
                tags={**tags, "Name": f"{name}-nat-eip"},
                opts=pulumi.ResourceOptions(parent=self.vpc),
            )
            self.nat_gateway = aws.ec2.NatGateway(
                f"{name}-nat-gw",
                subnet_id=self.public_subnet.id,
                allocation_id=self.nat_eip.id,
                tags={**tags, "Name": f"{name}-nat-gw"},
                opts=pulumi.ResourceOptions(
                    parent=self.public_subnet,
                    depends_on=[self.nat_eip, self.internet_gateway],
                ),
            )
            private_route = aws.ec2.RouteTableRouteArgs(
                cidr_block=DEFAULT_ROUTE_CIDR,
                nat_gateway_id=self.nat_gateway.id,
            )
        else:
            pulumi.log.warn(
                "private subnet default route targets the internet gateway; "
                "instances with public addresses in it are reachable from the internet",
                resource=self,
            )
            private_route = aws.ec2.RouteTableRouteArgs(
                cidr_block=DEFAULT_ROUTE_CIDR,
                gateway_id=self.internet_gateway.id,
            )

        self.private_route_table = aws.ec2.RouteTable(
            f"{name}-private-rt",
            vpc_id=self.vpc.id,
            routes=[private_route],
            tags={**tags, "Name": f"{name}-private-rt"},
            opts=pulumi.ResourceOptions(parent=self.vpc),
        )

        self.public_route_table_association = aws.ec2.RouteTableAssociation(
            f"{name}-public-rta",
            subnet_id=self.public_subnet.id,
            route_table_id=self.public_route_table.id,
            opts=pulumi.ResourceOptions(parent=self.public_route_table),
        )

        self.private_route_table_association = aws.ec2.RouteTableAssociation(
            f"{name}-private-rta",
            subnet_id=self.private_subnet.id,
            route_table_id=self.private_route_table.id,
            opts=pulumi.ResourceOptions(parent=self.private_route_table),
        )

        # Register outputs
        outputs = {
            "vpc_id": self.vpc.id,
            "vpc_cidr": self.vpc.cidr_block,
            "internet_gateway_id": self.internet_gateway.id,
            "public_subnet_id": self.public_subnet.id,
            "private_subnet_id": self.private_subnet.id,
            "public_route_table_id": self.public_route_table.id,
            "private_route_table_id": self.private_route_table.id,
        }
        if self.nat_gateway:
            outputs["nat_gateway_id"] = self.nat_gateway.id
            outputs["nat_eip_address"] = self.nat_eip.public_ip

        self.register_outputs(outputs)

    @property
    def route_tables(self) -> List[aws.ec2.RouteTable]:
        return [self.public_route_table, self.private_route_table]
