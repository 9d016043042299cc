import pulumi
import pytest

from infra.ec2.ec2 import Ec2Instance
from infra.ec2.key_pair import Ec2KeyPair

from .helpers import AMI_ID, mocks


@pulumi.runtime.test
def test_existing_key_name_is_used_without_creating_a_key_pair():
    key_pair = Ec2KeyPair("kp-named", args={"key_name": "dev-key", "public_key": "ssh-rsa AAAA"})

    assert key_pair.key_pair is None

    def check(key_name):
        assert key_name == "dev-key"
        assert mocks.registered("aws:ec2/keyPair:KeyPair", "kp-named") == []

    return key_pair.key_name.apply(check)


@pulumi.runtime.test
def test_public_key_is_imported_when_no_key_name():
    key_pair = Ec2KeyPair("kp-imported", args={"public_key": "ssh-rsa AAAA"})

    def check(args):
        key_name, public_key = args
        assert key_name == "kp-imported-key-generated"
        assert public_key == "ssh-rsa AAAA"

    return pulumi.Output.all(key_pair.key_name, key_pair.key_pair.public_key).apply(check)


@pulumi.runtime.test
def test_key_pair_needs_a_name_or_public_key():
    with pytest.raises(ValueError, match="key_name or public_key"):
        Ec2KeyPair("kp-missing", args={})


@pulumi.runtime.test
def test_instance_uses_latest_ubuntu_ami_and_wiring():
    server = Ec2Instance(
        "srv-wired",
        args={
            "instance_type": "t3.micro",
            "subnet_id": "subnet-123",
            "security_group_ids": ["sg-123"],
            "key_name": "dev-key",
            "iam_instance_profile": "myProfile",
            "user_data": "#!/bin/bash\necho hi\n",
            "tags": {"Environment": "test"},
        },
    )

    def check(args):
        ami, ami_id, instance_type, subnet_id, sg_ids, key_name, profile, user_data, tags = args
        assert ami == AMI_ID
        assert ami_id == AMI_ID
        assert instance_type == "t3.micro"
        assert subnet_id == "subnet-123"
        assert sg_ids == ["sg-123"]
        assert key_name == "dev-key"
        assert profile == "myProfile"
        assert user_data.startswith("#!/bin/bash")
        assert tags == {"Environment": "test", "Name": "srv-wired"}

    return pulumi.Output.all(
        server.instance.ami,
        server.ami_id,
        server.instance.instance_type,
        server.instance.subnet_id,
        server.instance.vpc_security_group_ids,
        server.instance.key_name,
        server.instance.iam_instance_profile,
        server.instance.user_data,
        server.instance.tags,
    ).apply(check)


@pulumi.runtime.test
def test_explicit_ami_skips_lookup():
    server = Ec2Instance("srv-ami", args={"ami": "ami-explicit", "security_group_ids": ["sg-123"]})

    return server.instance.ami.apply(lambda ami: assert_equal(ami, "ami-explicit"))


@pulumi.runtime.test
def test_security_groups_are_required():
    with pytest.raises(ValueError, match="security_group_ids"):
        Ec2Instance("srv-no-sg", args={})


def assert_equal(actual, expected):
    assert actual == expected


@pulumi.runtime.test
def test_ami_lookup_targets_latest_amazon_ubuntu_2004_hvm():
    server = Ec2Instance("srv-lookup", args={"security_group_ids": ["sg-123"]})

    def check(ami):
        assert ami == AMI_ID
        lookups = mocks.invoked("aws:ec2/getAmi:getAmi")
        assert len(lookups) == 1
        lookup = lookups[0].args
        assert lookup["mostRecent"] is True
        assert list(lookup["owners"]) == ["amazon"]
        filters = {f["name"]: list(f["values"]) for f in lookup["filters"]}
        assert filters == {
            "name": ["ubuntu*-20.04-amd64-*"],
            "virtualization-type": ["hvm"],
        }

    return server.instance.ami.apply(check)
