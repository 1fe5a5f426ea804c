"""Click subcommands for the agentwire CLI."""
