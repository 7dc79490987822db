"""Forward Kubernetes container logs to Loggregator."""
