import json
import pulumi
import pulumi_aws as aws

EC2_SERVICE_PRINCIPAL = "ec2.amazonaws.com"

SSM_PARAMETER_READ_ACTIONS = [
    "ssm:GetParameter",
    "ssm:GetParameters",
    "ssm:GetParametersByPath",
]

RDS_READ_ONLY_ACTIONS = [
    "rds:Describe*",
    "rds:ListTagsForResource",
    "ec2:DescribeAccountAttributes",
    "ec2:DescribeAvailabilityZones",
    "ec2:DescribeInternetGateways",
    "ec2:DescribeSecurityGroups",
    "ec2:DescribeSubnets",
    "ec2:DescribeVpcAttribute",
    "ec2:DescribeVpcs",
]


def assume_role_policy() -> dict:
    """Trust policy letting only EC2 assume the role."""
    return {
        "Version": "2012-10-17",
        "Statement": [{
            "Action": "sts:AssumeRole",
            "Effect": "Allow",
            "Principal": {"Service": EC2_SERVICE_PRINCIPAL},
            "Sid": "",
        }],
    }


def allow_all_resources_policy(actions: list) -> dict:
    return {
        "Version": "2012-10-17",
        "Statement": [{
            "Effect": "Allow",
            "Action": list(actions),
            "Resource": "*",
        }],
    }


class IamInstanceProfile(pulumi.ComponentResource):
    """Creates an IAM role and instance profile for the app host with SSM and describe access."""

    def __init__(self, name: str, args: dict, opts: pulumi.ResourceOptions = None):
        """
        Creates an IAM role, its policies and attachments, and an instance profile.

        Args:
            name: The unique name of the resource.
            args: Dictionary containing configuration options:
                - managed_policy_arns: Existing policy ARNs to attach to the role (optional)
                - instance_profile_name: Fixed name for the instance profile (optional)
                - tags: Dictionary of tags to apply (optional)
            opts: Additional resource options.
        """
        super().__init__("custom:iam:IamInstanceProfile", name, {}, opts)

        managed_policy_arns = args.get("managed_policy_arns", [])
        instance_profile_name = args.get("instance_profile_name")
        tags = args.get("tags", {})

        # Create IAM role
        self.role = aws.iam.Role(
            f"{name}-role",
            assume_role_policy=json.dumps(assume_role_policy()),
            tags={**tags, "Name": f"{name}-role"},
            opts=pulumi.ResourceOptions(parent=self),
        )

        # Read access to SSM parameters, used by the bootstrap script
        self.ssm_policy = aws.iam.Policy(
            f"{name}-ssm-parameter-policy",
            policy=json.dumps(allow_all_resources_policy(SSM_PARAMETER_READ_ACTIONS)),
            tags=tags,
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.rds_policy = aws.iam.Policy(
            f"{name}-rds-read-only-policy",
            policy=json.dumps(allow_all_resources_policy(RDS_READ_ONLY_ACTIONS)),
            tags=tags,
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.policy_attachments = [
            aws.iam.RolePolicyAttachment(
                f"{name}-ssm-parameter-policy-attachment",
                policy_arn=self.ssm_policy.arn,
                role=self.role.name,
                opts=pulumi.ResourceOptions(parent=self.role),
            ),
            aws.iam.RolePolicyAttachment(
                f"{name}-rds-read-only-policy-attachment",
                policy_arn=self.rds_policy.arn,
                role=self.role.name,
                opts=pulumi.ResourceOptions(parent=self.role),
            ),
        ]

        for i, policy_arn in enumerate(managed_policy_arns):
            self.policy_attachments.append(
                aws.iam.RolePolicyAttachment(
                    f"{name}-managed-policy-attachment-{i}",
                    policy_arn=policy_arn,
                    role=self.role.name,
                    opts=pulumi.ResourceOptions(parent=self.role),
                )
            )

        # Create instance profile
        self.instance_profile = aws.iam.InstanceProfile(
            f"{name}-instance-profile",
            name=instance_profile_name,
            role=self.role.name,
            tags={**tags, "Name": f"{name}-instance-profile"},
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.register_outputs({
            "role_arn": self.role.arn,
            "role_name": self.role.name,
            "instance_profile_arn": self.instance_profile.arn,
            "instance_profile_name": self.instance_profile.name,
        })
