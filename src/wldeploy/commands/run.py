"""Run deployment tasks.

Wires the production implementations into a TaskOrchestrator and runs each
selected task in configuration order.
"""
import logging
from datetime import datetime
from pathlib import Path

from wldeploy.core import (
    ConsoleLogger,
    RealFileSystemService,
    LocalProcessRunner,
    BuildEnvironmentProvider,
    WorkspaceArtifactSelector,
    FtpTransferClient,
    StaticTargetEnvironmentStore,
    WorkspaceFileStager,
    YamlConfigLoader,
)
from wldeploy.deploy import (
    BuildContext,
    ConfigurationError,
    DeploymentStatus,
    DeploymentTaskError,
    Node,
    TaskOrchestrator,
)
from wldeploy.utils.config import load_config
from wldeploy.utils.jdk import JdkToolService

EXIT_OK = 0
EXIT_DEPLOYMENT_FAILED = 1
EXIT_USAGE = 2


def setup_parser(parser):
    """Setup argument parser for run command"""
    parser.add_argument(
        '--config', '-c',
        required=True,
        help='YAML configuration file (environments, JDKs, tasks)'
    )
    parser.add_argument(
        '--task', '-t',
        action='append',
        dest='tasks',
        help='Run only this task (repeatable, default: all tasks)'
    )
    parser.add_argument(
        '--jdk',
        help='JDK name to run weblogic.Deployer with (default: first configured JDK)'
    )
    parser.add_argument(
        '--workspace', '-w',
        default='.',
        help='Directory containing the built artifacts (default: current directory)'
    )
    parser.add_argument(
        '--build-id',
        help='Build identifier used for log paths (default: timestamp)'
    )
    parser.add_argument(
        '--job',
        help='Job name used for log paths (default: workspace directory name)'
    )
    parser.add_argument(
        '--node',
        help='Name of the remote node the build ran on (default: local)'
    )
    parser.add_argument(
        '--var', '-D',
        action='append',
        default=[],
        metavar='KEY=VALUE',
        help='Build variable (repeatable), e.g. -D DEPLOY_SHOP_SKIP=true'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )


def parse_variables(pairs):
    """Turn ['KEY=VALUE', ...] into a dict."""
    variables = {}
    for pair in pairs:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            raise ValueError(f"Invalid variable '{pair}', expected KEY=VALUE")
        variables[key] = value
    return variables


def build_orchestrator(config, filesystem, logger):
    """Assemble a TaskOrchestrator from production implementations."""
    runner = LocalProcessRunner()
    return TaskOrchestrator(
        config=config.deployer,
        env_provider=BuildEnvironmentProvider(),
        toolchains=JdkToolService(config.jdks, filesystem, runner, config.deployer.min_java_version),
        artifact_selector=WorkspaceArtifactSelector(filesystem),
        process_runner=runner,
        transfer_client=FtpTransferClient(),
        file_stager=WorkspaceFileStager(filesystem),
        target_store=StaticTargetEnvironmentStore(config.environments),
        filesystem=filesystem,
        logger=logger,
    )


def execute(args):
    """Execute run command"""
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'verbose', False) else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    filesystem = RealFileSystemService()
    try:
        config = load_config(args.config, YamlConfigLoader(filesystem))
        variables = parse_variables(args.var)
    except (ConfigurationError, ValueError) as e:
        print(f"Error: {e}")
        return EXIT_USAGE

    if args.tasks:
        unknown = [name for name in args.tasks if config.find_task(name) is None]
        if unknown:
            print(f"Error: Unknown task(s): {', '.join(unknown)}")
            return EXIT_USAGE
        tasks = [config.find_task(name) for name in args.tasks]
    else:
        tasks = list(config.tasks)

    if not tasks:
        print("No deployment task configured.")
        return EXIT_OK

    jdk_name = args.jdk or next(iter(config.jdks), None)
    if jdk_name is None:
        print("Error: No JDK configured; add a 'jdks' section or pass --jdk")
        return EXIT_USAGE

    workspace = Path(args.workspace)
    build = BuildContext(
        build_id=args.build_id or datetime.now().strftime('%Y%m%d-%H%M%S'),
        job_name=args.job or workspace.resolve().name,
        workspace=workspace,
        node=Node(name=args.node or '', is_local=not args.node),
        variables=variables,
        log_dir=config.deployer.log_dir,
    )

    print("=" * 80)
    print(f"Deployment of {build.job_name} #{build.build_id}")
    print("=" * 80)
    print()

    orchestrator = build_orchestrator(config, filesystem, ConsoleLogger())
    results = []
    for task in tasks:
        try:
            results.append(orchestrator.perform(task, jdk_name, build))
        except DeploymentTaskError as e:
            results.append(e.result)

    print()
    print(f"{'TASK':<30} {'STATUS':<10} ARTIFACT")
    for result in results:
        print(f"{result.task.task_name:<30} {result.status.value:<10} {result.artifact_full_name or '-'}")

    ok = (DeploymentStatus.SUCCEEDED, DeploymentStatus.DISABLED)
    return EXIT_OK if all(r.status in ok for r in results) else EXIT_DEPLOYMENT_FAILED
