"""Runtime settings of the version updater.

All values have defaults pointing at the public upstream sources and at the
files of the repository the tool is run in. They can be overridden via the
environment (see :py:meth:`Settings.from_env`) or the command line.

"""

import dataclasses
import os
from dataclasses import dataclass

#: endoflife.date feed of the Kubernetes release cycles
DEFAULT_FEED_URL = "https://endoflife.date/api/kubernetes.json"

#: Docker Hub tag listing of the kind node images
DEFAULT_REGISTRY_URL = "https://hub.docker.com/v2/repositories/kindest/node/tags"

#: Go source of minikube that contains the list of supported Kubernetes versions
DEFAULT_MINIKUBE_URL = (
    "https://raw.githubusercontent.com/kubernetes/minikube/master/"
    "pkg/minikube/constants/constants_kubernetes_versions.go"
)

DEFAULT_WORKFLOW_FILES = (
    ".github/workflows/functional_test.yaml",
    ".github/workflows/functional_test_v2.yaml",
)

DEFAULT_MATRIX_FILE = ".github/workflows/configs/e2e-test-matrix.json"

_TRUTHY = ("1", "true", "yes", "on", "-debug", "-debug=true", "--debug")


def _env_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    feed_url: str = DEFAULT_FEED_URL

    registry_url: str = DEFAULT_REGISTRY_URL

    minikube_url: str = DEFAULT_MINIKUBE_URL

    #: workflow files whose ``k8s-version:`` blocks get rewritten
    workflow_files: tuple[str, ...] = DEFAULT_WORKFLOW_FILES

    matrix_file: str = DEFAULT_MATRIX_FILE

    #: trace skipped and resolved versions, has no effect on the output
    debug: bool = False

    @staticmethod
    def from_env(env: dict[str, str] | None = None) -> "Settings":
        """Create the settings from the environment variables
        ``K8S_VERSIONS_FEED_URL``, ``K8S_VERSIONS_REGISTRY_URL``,
        ``K8S_VERSIONS_MINIKUBE_URL`` and ``DEBUG``.

        """
        env = os.environ if env is None else env
        return Settings(
            feed_url=env.get("K8S_VERSIONS_FEED_URL", DEFAULT_FEED_URL),
            registry_url=env.get("K8S_VERSIONS_REGISTRY_URL", DEFAULT_REGISTRY_URL),
            minikube_url=env.get("K8S_VERSIONS_MINIKUBE_URL", DEFAULT_MINIKUBE_URL),
            debug=_env_flag(env.get("DEBUG")),
        )

    def replace(self, **changes) -> "Settings":
        """Return a copy with all ``changes`` applied that are not ``None``."""
        return dataclasses.replace(
            self, **{k: v for k, v in changes.items() if v is not None}
        )
