"""Package manifests and package manager detection."""
