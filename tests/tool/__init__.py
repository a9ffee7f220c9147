"""Tests for the openstack-k8s command line tool."""
