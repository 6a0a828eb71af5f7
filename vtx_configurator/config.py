"""Run configuration built from the command line."""


class Config:
    """Options for one invocation. Not modified after parsing."""

    def __init__(self, persist: bool = False, revert: bool = False, load_vbox: bool = True,
                 stop_services: bool = True, quiet: bool = False, dry_run: bool = False,
                 debug: bool = False, prog: str = "vbox-vtx-fix"):
        self.persist = persist
        self.revert = revert
        self.load_vbox = load_vbox
        self.stop_services = stop_services
        self.quiet = quiet
        self.dry_run = dry_run
        # Dry runs are only useful with the simulated commands visible
        self.debug = debug or dry_run
        self.prog = prog

    @classmethod
    def from_args(cls, args, prog: str = "vbox-vtx-fix") -> "Config":
        return cls(
            persist=args.persist,
            revert=args.revert,
            load_vbox=not args.no_vbox,
            stop_services=not args.no_stop,
            quiet=args.quiet,
            dry_run=args.dry_run,
            debug=args.debug,
            prog=prog,
        )

    def __repr__(self) -> str:
        flags = ", ".join(f"{k}={v}" for k, v in vars(self).items())
        return f"Config({flags})"
