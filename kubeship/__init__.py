"""Deploy container images to Kubernetes as a Deployment plus optional Service."""

__version__ = "0.1.0"
