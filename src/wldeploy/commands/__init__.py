"""CLI sub-commands: each module exposes setup_parser(parser) and execute(args)."""
