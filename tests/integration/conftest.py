# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests using testcontainers.

Container lifecycle:
- session scope: the Memgraph container starts once per pytest session
- function scope: a fresh project id per test for isolation

Uses DockerContainer directly with bridge network IP + internal port, so the
tests also run from a devcontainer with docker-outside-of-docker, where the
mapped localhost port is unreachable.
"""

from __future__ import annotations

import logging
import time
import uuid

import pytest

logger = logging.getLogger(__name__)


# ── Pytest markers ──────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "memgraph: marks tests requiring a Memgraph container")


# =====================================================================
#  DEVCONTAINER NETWORKING HELPERS
# =====================================================================

def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries."""
    for attempt in range(max_attempts):
        try:
            wrapped = container.get_wrapped_container()
            wrapped.reload()
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            for net_name, net_info in networks.items():
                ip = net_info.get("IPAddress", "")
                if ip:
                    logger.info(
                        "Container %s IP: %s (network: %s, attempt %d)",
                        wrapped.short_id, ip, net_name, attempt + 1,
                    )
                    return ip
        except Exception as e:
            logger.debug("Error getting IP (attempt %d): %s", attempt + 1, e)
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


# =====================================================================
#  MEMGRAPH CONTAINER — session scope (bridge IP)
#
#  The MAGE image ships pagerank and community_detection procedures.
# =====================================================================

MEMGRAPH_IMAGE = "memgraph/memgraph-mage:latest"
MEMGRAPH_BOLT_PORT = 7687


@pytest.fixture(scope="session")
def memgraph_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(MEMGRAPH_IMAGE).with_exposed_ports(MEMGRAPH_BOLT_PORT)
    container.start()
    wait_for_logs(container, predicate=r"You are running Memgraph", timeout=90)
    time.sleep(2)

    ip = _get_container_bridge_ip(container)
    logger.info("Memgraph ready at %s:%d", ip, MEMGRAPH_BOLT_PORT)
    yield {"host": ip, "port": MEMGRAPH_BOLT_PORT}
    container.stop()


@pytest.fixture(scope="session")
def memgraph_uri(memgraph_container) -> str:
    c = memgraph_container
    return f"bolt://{c['host']}:{c['port']}"


@pytest.fixture
def project_id() -> str:
    return f"test_{uuid.uuid4().hex[:8]}"
