"""
hostdeploy Constants

Centralized constants for magic values, defaults, and configuration.
"""

# Default target configuration
DEFAULT_BRANCH = "main"
DEFAULT_SSH_PORT = 22
DEFAULT_CONTAINER_NAME = "myapp"
DEFAULT_SERVER_NAME = "_"
DEFAULT_APP_DIR_FORMAT = "/home/{user}/app"

# Environment variable prefix for target fields (HOSTDEPLOY_REPO_URL, ...)
ENV_PREFIX = "HOSTDEPLOY_"

# Compose Configuration
COMPOSE_COMMAND = "docker-compose"
COMPOSE_FILE_NAME = "docker-compose.yml"
COMPOSE_FILE_VERSION = "3.8"
COMPOSE_APP_SERVICE = "app"
COMPOSE_PROXY_SERVICE = "nginx"
COMPOSE_NETWORK = "webnet"

# Nginx Configuration
NGINX_IMAGE = "nginx:latest"
NGINX_LISTEN_PORT = 80
NGINX_CONTAINER_CONF_PATH = "/etc/nginx/conf.d/default.conf"
NGINX_CONF_DIR_NAME = "nginx"
NGINX_CONTAINER_CONF_NAME = "default.conf"
NGINX_SITES_AVAILABLE = "/etc/nginx/sites-available"
NGINX_SITES_ENABLED = "/etc/nginx/sites-enabled"
NGINX_TEMPLATE = "nginx.conf.j2"

# Packages installed on the remote host
BASE_PACKAGES = ["docker.io", "docker-compose"]
PROXY_PACKAGES = ["nginx"]
DOCKER_SOCKET = "/var/run/docker.sock"

# Validation probe
PROBE_URL = "http://localhost"

# SSH return code reserved for transport errors
SSH_TRANSPORT_ERROR_CODE = 255

# Log Configuration
DEFAULT_LOG_DIR = "logs"
LOG_FILE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# Secret masking
MASK = "***"
