"""
Pulumi program to deploy the dev application host:
- VPC with one public and one private subnet
- Security group for the app host
- IAM role and instance profile with SSM parameter and describe access
- Ubuntu 20.04 EC2 instance running the app behind an nginx reverse proxy
- SSM parameter publishing the instance's public IP to its bootstrap script
"""
import sys
import os
import pulumi

# Add the parent directory to Python path to import infra modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from infra.config.settings import load_settings
from infra.vpc.network import VpcNetwork
from infra.security_groups.security_groups import AppServerSecurityGroup
from infra.iam.iam import IamInstanceProfile
from infra.ec2.key_pair import Ec2KeyPair
from infra.ec2.ec2 import Ec2Instance
from infra.ec2.user_data import BootstrapOptions, render_user_data
from infra.ssm.rendezvous import PublicIpRendezvous, PublicIpParameter

# Get Pulumi configuration; fails here when no key pair can be resolved
settings = load_settings(pulumi.Config(), pulumi.Config("aws"))
prefix = settings.name_prefix

tags = {
    "Environment": prefix,
    "Project": pulumi.get_project(),
    "ManagedBy": "Pulumi",
}

# Create VPC Network
network = VpcNetwork(
    f"{prefix}-network",
    args={
        "cidr_block": settings.network.cidr_block,
        "instance_tenancy": settings.network.instance_tenancy,
        "public_subnet": {
            "cidr_block": settings.network.public_subnet.cidr_block,
            "availability_zone": settings.network.public_subnet.availability_zone,
        },
        "private_subnet": {
            "cidr_block": settings.network.private_subnet.cidr_block,
            "availability_zone": settings.network.private_subnet.availability_zone,
        },
        "private_egress": settings.network.private_egress,
        "tags": tags,
    },
)

# Create app host Security Group (HTTPS, HTTP, SSH and the app port)
app_sg = AppServerSecurityGroup(
    f"{prefix}-sg",
    args={
        "vpc_id": network.vpc.id,
        "app_port": settings.app.app_port,
        "tags": tags,
    },
)

# Create IAM role and instance profile
instance_profile = IamInstanceProfile(
    f"{prefix}-ec2",
    args={
        "managed_policy_arns": settings.iam.managed_policy_arns,
        "instance_profile_name": settings.iam.instance_profile_name,
        "tags": tags,
    },
)

key_pair = Ec2KeyPair(
    f"{prefix}-key-pair",
    args={
        "key_name": settings.key_name,
        "public_key": settings.public_key,
        "tags": tags,
    },
)

# Shared by the SSM parameter (writer) and the bootstrap script (reader)
rendezvous = PublicIpRendezvous(
    region=settings.region,
    parameter_name=settings.app.parameter_name,
)

user_data = render_user_data(
    BootstrapOptions(
        registry=settings.app.registry,
        app_image=settings.app.app_image,
        region=settings.region,
        app_port=settings.app.app_port,
        proxy_image=settings.app.proxy_image,
        backend_api_url=settings.app.backend_api_url,
    ),
    rendezvous,
)

server = Ec2Instance(
    f"{prefix}-server",
    args={
        "instance_type": settings.instance_type,
        "subnet_id": network.public_subnet.id,
        "security_group_ids": [app_sg.security_group.id],
        "key_name": key_pair.key_name,
        "iam_instance_profile": instance_profile.instance_profile.name,
        "user_data": user_data,
        "tags": tags,
    },
)

public_ip_parameter = PublicIpParameter(
    f"{prefix}-server-public-ip",
    args={
        "rendezvous": rendezvous,
        "instance": server.instance,
        "tags": tags,
    },
)

# Export outputs
pulumi.export("vpc_id", network.vpc.id)
pulumi.export("vpc_cidr", network.vpc.cidr_block)
pulumi.export("internet_gateway_id", network.internet_gateway.id)
pulumi.export("public_subnet_id", network.public_subnet.id)
pulumi.export("private_subnet_id", network.private_subnet.id)
pulumi.export("public_route_table_id", network.public_route_table.id)
pulumi.export("private_route_table_id", network.private_route_table.id)
if network.nat_gateway:
    pulumi.export("nat_gateway_id", network.nat_gateway.id)

pulumi.export("security_group_id", app_sg.security_group.id)

pulumi.export("role_arn", instance_profile.role.arn)
pulumi.export("instance_profile_name", instance_profile.instance_profile.name)

pulumi.export("key_name", key_pair.key_name)
pulumi.export("ami_id", server.ami_id)
pulumi.export("server_id", server.instance.id)
pulumi.export("server_public_ip", server.instance.public_ip)
pulumi.export("server_public_dns", server.instance.public_dns)
pulumi.export("server_private_ip", server.instance.private_ip)
pulumi.export("public_ip_parameter_name", public_ip_parameter.parameter.name)

# Decoded key stays a secret; read it with `pulumi stack output --show-secrets`
pulumi.export("private_key", settings.private_key)

# Export helpful SSH command
pulumi.export(
    "ssh_command",
    pulumi.Output.concat(
        "ssh -i <your-key>.pem ubuntu@",
        server.instance.public_dns,
    ),
)
pulumi.export(
    "application_url",
    pulumi.Output.concat("http://", server.instance.public_ip),
)
