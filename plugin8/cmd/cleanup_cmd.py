"""
Remove the console plugin objects left in the previous namespace after the
FlowCollector moved to a new one
"""

# Standard
import argparse

# First Party
import alog

# Local
from .. import config
from ..exceptions import assert_config
from .base import CmdBase
from .common import print_dry_run_objects, setup

log = alog.use_channel("MAIN")


class CleanupCmd(CmdBase):
    __doc__ = __doc__

    ## Interface ##

    def add_subparser(
        self,
        subparsers: argparse._SubParsersAction,
    ) -> argparse.ArgumentParser:
        parser = subparsers.add_parser("cleanup", help=__doc__)
        self.add_runtime_args(parser)
        return parser

    def cmd(self, args: argparse.Namespace):
        assert_config(
            config.previous_namespace,
            "cleanup requires --previous_namespace to be set",
        )
        session, reconciler = setup(args)
        n_deleted = reconciler.cleanup_namespace(session)
        log.info(
            "Removed %d objects from namespace %s", n_deleted, config.previous_namespace
        )
        print_dry_run_objects(session.deploy_manager)
