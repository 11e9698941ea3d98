"""
Deployer command line construction.

Builds the exact argument vector handed to the process runner. Pure: no I/O,
identical parameters always give an identical list.

Standard layout:
    <jdk>/bin/java [java_opts] -cp <classpath> weblogic.Deployer
        -debug -remote -verbose [-noexit] [-upload]
        -name <deployment_name> [-source <path>] -targets <targets>
        -adminurl <protocol>://<host>:<port> -user <login> -password <password>
        -deploy|-undeploy [-library] [-stage|-nostage|-external_stage] [-plan <plan>]

Custom layout:
    <jdk>/bin/java [java_opts] -cp <classpath> weblogic.Deployer <tokenized command>
"""

import shlex
from typing import List, Optional, Sequence

from .models import DeployerCommand, DeployerParameters, StageMode

DEPLOYER_MAIN_CLASS = 'weblogic.Deployer'
DEFAULT_PROTOCOL = 't3'


def _java_prefix(params: DeployerParameters) -> List[str]:
    """java executable, JVM options and classpath up to the main class."""
    args = [params.toolchain.java_executable]
    if params.java_opts and params.java_opts.strip():
        args.extend(shlex.split(params.java_opts))
    if params.classpath and params.classpath.strip():
        args.extend(['-cp', params.classpath])
    args.append(DEPLOYER_MAIN_CLASS)
    return args


def admin_url(params: DeployerParameters) -> str:
    env = params.environment
    protocol = params.protocol or env.protocol or DEFAULT_PROTOCOL
    return f"{protocol}://{env.host}:{env.port}"


def build_command_line(params: DeployerParameters, arguments: Optional[Sequence[str]] = None) -> List[str]:
    """
    Return the argument vector for one deployer invocation.

    Args:
        params: Invocation parameters; ``params.command`` selects deploy/undeploy
        arguments: Already tokenized and token-resolved custom arguments.
            When given, they are appended verbatim after the main class;
            the standard options are not generated.

    Raises:
        ValueError: If neither a custom command nor params.command is set
    """
    args = _java_prefix(params)

    if arguments is not None:
        args.extend(arguments)
        return args

    if params.command is None:
        raise ValueError("A deployer command (deploy/undeploy) or a custom command line is required")

    args.extend(['-debug', '-remote', '-verbose'])
    if params.no_exit:
        args.append('-noexit')
    if params.command is DeployerCommand.DEPLOY and not params.is_library:
        args.append('-upload')

    args.extend(['-name', params.deployment_name])
    if params.source:
        args.extend(['-source', params.source])
    args.extend(['-targets', params.deployment_targets])
    args.extend(['-adminurl', admin_url(params)])

    env = params.environment
    if env.login:
        args.extend(['-user', env.login])
    if env.password:
        args.extend(['-password', env.password])

    args.append(f"-{params.command.value}")

    if params.is_library:
        args.append('-library')
    if params.stage_mode is not StageMode.BY_DEFAULT:
        args.append(f"-{params.stage_mode.value}")
    if params.command is DeployerCommand.DEPLOY and params.deployment_plan:
        args.extend(['-plan', params.deployment_plan])

    return args
