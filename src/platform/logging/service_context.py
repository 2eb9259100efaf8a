"""
Service context extraction for distributed logging.

Identifies the emitting process so log lines from several API replicas can be
told apart once they are shipped to a central store.
"""

import os
from functools import lru_cache
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'inventory')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Containers expose a short hostname; fall back to the PID locally
    instance = os.getenv('HOSTNAME') or ''
    if instance:
        instance = instance[:12]
    elif deploy_env != 'local_dev':
        instance = socket.gethostname()[:12]
    else:
        instance = str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
