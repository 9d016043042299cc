"""
The public IP handshake between the deployment and the instance.

The deployment writes the instance's public IP to an SSM String parameter once
the instance exists; the instance's bootstrap script polls the same parameter
and uses the value as the reverse proxy's virtual host. Both sides take their
parameter name and region from one ``PublicIpRendezvous`` value.
"""
from dataclasses import dataclass

import pulumi
import pulumi_aws as aws


@dataclass(frozen=True)
class PublicIpRendezvous:
    region: str
    parameter_name: str = "publicIP"
    wait_attempts: int = 30
    wait_interval_seconds: int = 10

    def __post_init__(self):
        if not self.parameter_name:
            raise ValueError("parameter_name is required")
        if not self.region:
            raise ValueError("region is required")
        if self.wait_attempts < 1:
            raise ValueError("wait_attempts must be at least 1")

    def read_command(self) -> str:
        """Shell command printing the current parameter value."""
        return (
            f'aws ssm get-parameter --region "{self.region}" --name "{self.parameter_name}" '
            "--query Parameter.Value --output text"
        )

    def wait_command(self, variable: str = "PUBLIC_IP") -> str:
        """Shell snippet that polls until the parameter is readable and stores it in ``variable``."""
        return f"""for attempt in $(seq 1 {self.wait_attempts}); do
  {variable}="$({self.read_command()} 2>/dev/null || true)"
  if [ -n "${variable}" ] && [ "${variable}" != "None" ]; then
    break
  fi
  sleep {self.wait_interval_seconds}
done
if [ -z "${variable}" ] || [ "${variable}" = "None" ]; then
  echo "SSM parameter {self.parameter_name} was not available" >&2
  exit 1
fi"""


class PublicIpParameter(pulumi.ComponentResource):
    """Publishes an instance's public IP to the rendezvous SSM parameter."""

    def __init__(self, name: str, args: dict, opts: pulumi.ResourceOptions = None):
        """
        Args:
            name: The unique name of the resource.
            args: Dictionary containing configuration options:
                - rendezvous: PublicIpRendezvous naming the parameter (required)
                - instance: aws.ec2.Instance whose public IP is published (required)
                - tags: Dictionary of tags to apply (optional)
            opts: Additional resource options.
        """
        super().__init__("custom:ssm:PublicIpParameter", name, {}, opts)

        rendezvous = args.get("rendezvous")
        instance = args.get("instance")
        tags = args.get("tags", {})

        if rendezvous is None:
            raise ValueError("rendezvous is required")
        if instance is None:
            raise ValueError("instance is required")

        self.parameter = aws.ssm.Parameter(
            f"{name}-parameter",
            name=rendezvous.parameter_name,
            type="String",
            value=instance.public_ip,
            tags=tags,
            opts=pulumi.ResourceOptions(parent=self, depends_on=[instance]),
        )

        self.register_outputs({
            "parameter_name": self.parameter.name,
            "parameter_value": self.parameter.value,
        })
