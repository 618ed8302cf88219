# scripts/healthcheck.py
import sys

import requests

from object_gateway.common.config import settings


def check_service(service_type, port=settings.GATEWAY_PORT):
    try:
        response = requests.get(f"http://localhost:{port}/health", timeout=5)
        if response.status_code == 200:
            print(f"{service_type} is healthy")
            return 0
        else:
            print(f"{service_type} is not healthy")
            return 1
    except requests.RequestException:
        print(f"Cannot connect to {service_type}")
        return 1


if __name__ == "__main__":
    service_type = sys.argv[1] if len(sys.argv) > 1 else "gateway"
    port = int(sys.argv[2]) if len(sys.argv) > 2 else settings.GATEWAY_PORT
    sys.exit(check_service(service_type, port))
