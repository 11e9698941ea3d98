"""List configured deployment tasks and target environments."""
from wldeploy.core import RealFileSystemService, YamlConfigLoader
from wldeploy.deploy import ConfigurationError
from wldeploy.utils.config import load_config


def setup_parser(parser):
    """Setup argument parser for list command"""
    parser.add_argument(
        '--config', '-c',
        required=True,
        help='YAML configuration file'
    )


def execute(args):
    """Execute list command"""
    try:
        config = load_config(args.config, YamlConfigLoader(RealFileSystemService()))
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 2

    print("Target environments:")
    if not config.environments:
        print("  (none)")
    for env in config.environments:
        print(f"  {env.name:<20} {env.protocol}://{env.host}:{env.port}")

    print()
    print("Deployment tasks:")
    if not config.tasks:
        print("  (none)")
    for task in config.tasks:
        mode = 'custom' if task.is_custom else 'redeploy'
        kind = 'library' if task.is_library else 'application'
        print(f"  [{task.id}] {task.task_name:<20} -> {task.target_environment_name:<12} "
              f"{task.deployment_name} ({kind}, {mode})")
    return 0
