import pulumi
import pulumi_aws as aws

UBUNTU_2004_NAME_FILTER = "ubuntu*-20.04-amd64-*"


def lookup_ubuntu_ami(name_filter: str = UBUNTU_2004_NAME_FILTER) -> str:
    """Returns the id of the most recent Amazon-owned Ubuntu HVM image matching the filter."""
    ami_data = aws.ec2.get_ami(
        most_recent=True,
        owners=["amazon"],
        filters=[
            aws.ec2.GetAmiFilterArgs(
                name="name",
                values=[name_filter],
            ),
            aws.ec2.GetAmiFilterArgs(
                name="virtualization-type",
                values=["hvm"],
            ),
        ],
    )
    return ami_data.id


class Ec2Instance(pulumi.ComponentResource):
    """
    A reusable EC2 instance component that creates an EC2 instance with common configurations.
    """

    def __init__(self, name: str, args: dict, opts: pulumi.ResourceOptions = None):
        """
        Creates an EC2 instance with the specified configuration.

        Args:
            name: The unique name of the resource.
            args: Dictionary containing configuration options:
                - instance_type: EC2 instance type (default: t3.micro)
                - ami: AMI ID to use (optional, defaults to latest Ubuntu 20.04)
                - key_name: SSH key pair name (optional)
                - subnet_id: Subnet ID to launch instance in (optional)
                - security_group_ids: List of security group IDs (required)
                - iam_instance_profile: IAM instance profile name (optional)
                - user_data: User data script to run on instance launch (optional)
                - tags: Dictionary of tags to apply (optional)
            opts: Additional resource options.
        """
        super().__init__("custom:ec2:Ec2Instance", name, {}, opts)

        # Get configuration with defaults
        instance_type = args.get("instance_type", "t3.micro")
        ami = args.get("ami")
        key_name = args.get("key_name")
        subnet_id = args.get("subnet_id")
        security_group_ids = args.get("security_group_ids", [])
        iam_instance_profile = args.get("iam_instance_profile")
        user_data = args.get("user_data")
        tags = args.get("tags", {})

        # Validate required parameters
        if not security_group_ids:
            raise ValueError("security_group_ids must be provided")

        # If no AMI specified, get the latest Ubuntu 20.04 AMI
        if not ami:
            ami = lookup_ubuntu_ami()
        self.ami_id = pulumi.Output.from_input(ami)

        # Create EC2 instance
        self.instance = aws.ec2.Instance(
            f"{name}-instance",
            instance_type=instance_type,
            ami=ami,
            key_name=key_name,
            subnet_id=subnet_id,
            vpc_security_group_ids=security_group_ids,
            iam_instance_profile=iam_instance_profile,
            user_data=user_data,
            tags={**tags, "Name": name},
            opts=pulumi.ResourceOptions(parent=self),
        )

        # Register outputs
        self.register_outputs({
            "instance_id": self.instance.id,
            "ami_id": self.ami_id,
            "public_ip": self.instance.public_ip,
            "public_dns": self.instance.public_dns,
            "private_ip": self.instance.private_ip,
        })
