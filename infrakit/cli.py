"""
This module purpose is to handle command line interface
"""

import argparse
import logging
import sys

from . import codec
from .action_executor import ActionExecutor
from .config import InfraConfig, SETTABLE_KEYS
from .errors import InfrakitError
from .hypervisors import HypervisorList
from .node import Node, NodeList
from .utils import info, success, error, warning, heading, BOLD, RESET

def main(argv=None):
    """
    main: main loop for the program
    """
    parser = argparse.ArgumentParser(description="infrakit - control-plane node manager")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--manifest", help="Node manifest file (default from config)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # infrakit node add|list
    prepare_cmd_node(subparsers)

    # infrakit hypervisor add|list
    prepare_cmd_hypervisor(subparsers)

    # infrakit specs
    prepare_cmd_specs(subparsers)

    # infrakit reconcile
    prepare_cmd_reconcile(subparsers)

    # infrakit config get|set
    prepare_cmd_config(subparsers)

    args = parser.parse_args(argv)

    try:
        config = InfraConfig().load({"manifest": args.manifest})
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else config.get("log_level", "INFO"),
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

        if args.command == "node":
            if args.action == "add":
                ok = cmd_node_add(args, config)
            else:
                ok = cmd_node_list(args, config)
        elif args.command == "hypervisor":
            if args.action == "add":
                ok = cmd_hypervisor_add(args, config)
            else:
                ok = cmd_hypervisor_list(args, config)
        elif args.command == "specs":
            ok = cmd_specs(args, config)
        elif args.command == "reconcile":
            ok = cmd_reconcile(args, config)
        elif args.command == "config":
            if args.action == "set":
                ok = cmd_config_set(args, config)
            else:
                ok = cmd_config_get(args, config)
        else:
            ok = False
    except InfrakitError as e:
        error(str(e))
        ok = False

    return 0 if ok else 1

def load_nodes(config: InfraConfig, hypervisors: HypervisorList = None) -> NodeList:
    """
    load_nodes: restores nodes from the manifest file, empty list if there is none
    """
    manifest = config.manifest_path()
    if not manifest.exists():
        return NodeList()
    return NodeList.from_specs(manifest.read_text(), hypervisors)

def save_nodes(config: InfraConfig, nodes: NodeList):
    """
    save_nodes: writes nodes back to the manifest file
    """
    # Unlike NodeList.specs(), a node that fails to encode aborts the write
    # (EncodingFailedError) instead of being dropped from the manifest
    text = "".join(f"{codec.DOCUMENT_SEPARATOR}{node.specs()}" for node in nodes)
    manifest = config.manifest_path()
    manifest.parent.mkdir(parents=True, exist_ok=True)
    manifest.write_text(text)

def prepare_cmd_node(subparsers):
    """
    prepare_cmd_node: prepares parser for subcommand and args for `node`
    """
    node_p = subparsers.add_parser("node", help="Manage control-plane nodes")
    node_sub = node_p.add_subparsers(dest="action", required=True)

    add_p = node_sub.add_parser("add", help="Add a node on a random hypervisor")
    add_p.add_argument("name", help="Node name")
    add_p.add_argument("--cluster", help="Cluster the node belongs to (default from config)")

    node_sub.add_parser("list", help="List nodes in the manifest")

def cmd_node_add(args, config: InfraConfig) -> bool:
    """
    cmd_node_add: handles 'node add' command
    """
    if not args.name:
        error("Node name must not be empty")
        return False

    hypervisors = config.hypervisors()
    nodes = load_nodes(config, hypervisors)
    if nodes.by_name(args.name) is not None:
        error(f"Node '{args.name}' already exists in {config.manifest_path()}")
        return False

    cluster = args.cluster or config.get("cluster")
    node = Node.with_random_hypervisor(args.name, cluster, hypervisors)
    nodes.append(node)
    save_nodes(config, nodes)
    success(f"Added node '{node.name}' to cluster '{cluster}' on hypervisor '{node.hypervisor_name}'")
    return True

def cmd_node_list(args, config: InfraConfig) -> bool:
    """
    cmd_node_list: handles 'node list' command
    """
    nodes = load_nodes(config, config.hypervisors())
    if not nodes:
        info("No nodes defined.")
        return True

    heading("Nodes:")
    print(f"  {BOLD}{'NAME':<20} {'HYPERVISOR':<20} {'CLUSTER':<20} READY{RESET}")
    for node in nodes:
        ready = "yes" if node.is_ready() else "no"
        print(f"  {node.name:<20} {node.hypervisor_name:<20} {node.cluster_name:<20} {ready}")
    return True

def prepare_cmd_hypervisor(subparsers):
    """
    prepare_cmd_hypervisor: prepares parser for subcommand and args for `hypervisor`
    """
    hv_p = subparsers.add_parser("hypervisor", help="Manage hypervisors")
    hv_sub = hv_p.add_subparsers(dest="action", required=True)

    add_p = hv_sub.add_parser("add", help="Register a hypervisor in infra.yaml")
    add_p.add_argument("name", help="Hypervisor name")
    add_p.add_argument("--backend", default="docker", help="Backend to use (docker)")
    add_p.add_argument("--endpoint", help="Backend endpoint, e.g. ssh://root@10.0.0.2")

    hv_sub.add_parser("list", help="List configured hypervisors")

def cmd_hypervisor_add(args, config: InfraConfig) -> bool:
    """
    cmd_hypervisor_add: handles 'hypervisor add' command
    """
    entry = {"name": args.name, "backend": args.backend}
    if args.endpoint:
        entry["endpoint"] = args.endpoint
    if not config.add_hypervisor(entry):
        warning(f"Hypervisor '{args.name}' is already configured")
        return False
    success(f"Added hypervisor '{args.name}' ({args.backend})")
    return True

def cmd_hypervisor_list(args, config: InfraConfig) -> bool:
    """
    cmd_hypervisor_list: handles 'hypervisor list' command
    """
    hypervisors = config.hypervisors()
    if not hypervisors:
        info("No hypervisors configured.")
        return True

    heading("Hypervisors:")
    for hypervisor in hypervisors:
        print(f"  {hypervisor.name:<20} {type(hypervisor).__name__}")
    return True

def prepare_cmd_specs(subparsers):
    """
    prepare_cmd_specs: prepares parser for subcommand and args for `specs`
    """
    subparsers.add_parser("specs", help="Print versioned node specs as a YAML stream")

def cmd_specs(args, config: InfraConfig) -> bool:
    """
    cmd_specs: handles 'specs' command
    """
    nodes = load_nodes(config)
    sys.stdout.write(nodes.specs())
    return True

def prepare_cmd_reconcile(subparsers):
    """
    prepare_cmd_reconcile: prepares parser for subcommand and args for `reconcile`
    """
    reconcile_p = subparsers.add_parser("reconcile", help="Reconcile control-plane components of nodes")
    reconcile_p.add_argument("names", nargs="*", help="Nodes to reconcile (default: all)")
    reconcile_p.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Show what would be done without applying changes"
    )

def cmd_reconcile(args, config: InfraConfig) -> bool:
    """
    cmd_reconcile: handles 'reconcile' command; nodes are reconciled one at a time
    """
    nodes = load_nodes(config, config.hypervisors())
    if args.names:
        missing = [name for name in args.names if nodes.by_name(name) is None]
        if missing:
            error(f"Unknown nodes: {', '.join(missing)}")
            return False
        nodes = NodeList(nodes.by_name(name) for name in args.names)

    actions = [
        {
            "func": node.reconcile,
            "desc": f"Reconcile node {node.name} on hypervisor {node.hypervisor_name}",
        }
        for node in nodes
    ]
    return ActionExecutor().execute_actions(actions, dry_run=args.dry_run)

def prepare_cmd_config(subparsers):
    """
    prepare_cmd_config: prepares parser for subcommand and args for `config`
    """
    config_p = subparsers.add_parser("config", help="Show or change settings")
    config_sub = config_p.add_subparsers(dest="action", required=True)

    get_p = config_sub.add_parser("get", help="Print the effective value of a setting")
    get_p.add_argument("key", help="Setting name, e.g. cluster")

    set_p = config_sub.add_parser("set", help="Write a setting to infra.yaml")
    set_p.add_argument("key", choices=SETTABLE_KEYS, help="Setting name")
    set_p.add_argument("value", help="New value")
    set_p.add_argument(
        "--global", dest="global_config",
        action="store_true",
        help="Write to ~/.config/infrakit/config.yaml instead"
    )

def cmd_config_get(args, config: InfraConfig) -> bool:
    """
    cmd_config_get: handles 'config get' command
    """
    value = config.get(args.key)
    if value is None:
        error(f"Setting '{args.key}' is not defined")
        return False
    print(value)
    return True

def cmd_config_set(args, config: InfraConfig) -> bool:
    """
    cmd_config_set: handles 'config set' command
    """
    config.set_value(args.key, args.value, global_config=args.global_config)
    where = "global config" if args.global_config else "infra.yaml"
    success(f"Set {args.key} = {config.get(args.key)} in {where}")
    return True

if __name__ == "__main__":
    sys.exit(main())
