"""Command line tool for openstack-k8s."""
