"""
wldeploy - WebLogic deployment task runner

Deploys build artifacts to WebLogic environments through weblogic.Deployer,
with optional FTP transfer of shared libraries and custom command sequences.
"""
import argparse
import sys

__version__ = "1.0.0"


def main():
    """Main CLI entry point"""
    from wldeploy.commands import run, list_tasks

    parser = argparse.ArgumentParser(
        prog='wldeploy',
        description='wldeploy: WebLogic deployment task runner',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  wldeploy list -c deploy.yaml                    # Show environments and tasks
  wldeploy run -c deploy.yaml                     # Run every task
  wldeploy run -c deploy.yaml -t shop --jdk jdk8  # Run one task with a given JDK
  wldeploy run -c deploy.yaml -D DEPLOY_SHOP_SKIP=true
        '''
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run deployment tasks')
    run.setup_parser(run_parser)

    # List command
    list_parser = subparsers.add_parser('list', help='List environments and tasks')
    list_tasks.setup_parser(list_parser)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Dispatch to command handler
    try:
        if args.command == 'run':
            sys.exit(run.execute(args))
        elif args.command == 'list':
            sys.exit(list_tasks.execute(args))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
