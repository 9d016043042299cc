import pulumi
import pulumi_aws as aws


class Ec2KeyPair(pulumi.ComponentResource):
    """Resolves the SSH key pair name for an instance, importing a public key when needed."""

    def __init__(self, name: str, args: dict, opts: pulumi.ResourceOptions = None):
        """
        Args:
            name: The unique name of the resource.
            args: Dictionary containing configuration options:
                - key_name: Name of an existing key pair (optional)
                - public_key: Public key material to import (required if key_name is not set)
                - tags: Dictionary of tags to apply (optional)
            opts: Additional resource options.
        """
        super().__init__("custom:ec2:Ec2KeyPair", name, {}, opts)

        key_name = args.get("key_name")
        public_key = args.get("public_key")
        tags = args.get("tags", {})

        self.key_pair = None
        if key_name:
            self.key_name = pulumi.Output.from_input(key_name)
        elif public_key:
            pulumi.log.info("no keyName configured, importing the supplied public key", resource=self)
            self.key_pair = aws.ec2.KeyPair(
                f"{name}-key",
                public_key=public_key,
                tags={**tags, "Name": f"{name}-key"},
                opts=pulumi.ResourceOptions(parent=self),
            )
            self.key_name = self.key_pair.key_name
        else:
            raise ValueError("must provide one of key_name or public_key")

        self.register_outputs({
            "key_name": self.key_name,
        })
