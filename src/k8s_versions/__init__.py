"""Keep CI test matrices in sync with the supported Kubernetes releases."""
