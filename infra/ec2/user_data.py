"""
Bootstrap script for the app host.

Installs Docker, logs in to the container registry, then runs the app
container behind an nginx reverse proxy. The proxy's virtual host is the
public IP read back from the rendezvous SSM parameter.
"""
from dataclasses import dataclass

from infra.ssm.rendezvous import PublicIpRendezvous

APP_CONTAINER = "app-container"
PROXY_CONTAINER = "nginx"
DOCKER_NETWORK = "app-net"


@dataclass
class BootstrapOptions:
    registry: str
    app_image: str
    region: str
    app_port: int = 3000
    proxy_image: str = "jwilder/nginx-proxy"
    backend_api_url: str = "http://backend:3456"

    @property
    def app_image_uri(self) -> str:
        return f"{self.registry}/{self.app_image}"


def render_user_data(options: BootstrapOptions, rendezvous: PublicIpRendezvous) -> str:
    """Renders the instance user data. The result is passed to EC2 as-is."""
    return f"""#!/bin/bash
set -e

apt-get update
apt-get install -y cloud-utils apt-transport-https ca-certificates curl software-properties-common
curl -fsSL https://download.docker.com/linux/ubuntu/gpg | apt-key add -
add-apt-repository \\
   "deb [arch=amd64] https://download.docker.com/linux/ubuntu \\
   $(lsb_release -cs) \\
   stable"
apt-get update
apt-get install -y docker-ce
usermod -aG docker ubuntu
apt-get install -y awscli

aws ecr get-login-password --region {options.region} | docker login --username AWS --password-stdin {options.registry}

# Public IP is published to SSM by the deployment after the instance is created
{rendezvous.wait_command("PUBLIC_IP")}

docker network inspect {DOCKER_NETWORK} >/dev/null 2>&1 || docker network create {DOCKER_NETWORK}
docker rm -f {APP_CONTAINER} {PROXY_CONTAINER} || true
docker run -d --name {APP_CONTAINER} --network {DOCKER_NETWORK} -p {options.app_port}:{options.app_port} \\
   -e VIRTUAL_HOST="$PUBLIC_IP" \\
   -e BACKEND_API_URL="{options.backend_api_url}" \\
   {options.app_image_uri}
docker run -d --name {PROXY_CONTAINER} --network {DOCKER_NETWORK} -p 80:80 \\
   -v /var/run/docker.sock:/tmp/docker.sock:ro \\
   -t {options.proxy_image}
"""
