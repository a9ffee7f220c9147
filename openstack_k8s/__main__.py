"""Run the openstack-k8s command line tool with `python -m openstack_k8s`."""

from openstack_k8s.tool.openstack_k8s import main

if __name__ == "__main__":
    main()
