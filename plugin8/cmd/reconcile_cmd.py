"""
Run one reconciliation pass of the console plugin for a FlowCollector
"""

# Standard
import argparse

# First Party
import alog

# Local
from .base import CmdBase
from .common import print_dry_run_objects, setup

log = alog.use_channel("MAIN")


class ReconcileCmd(CmdBase):
    __doc__ = __doc__

    ## Interface ##

    def add_subparser(
        self,
        subparsers: argparse._SubParsersAction,
    ) -> argparse.ArgumentParser:
        parser = subparsers.add_parser("reconcile", help=__doc__)
        self.add_runtime_args(parser)
        return parser

    def cmd(self, args: argparse.Namespace):
        session, reconciler = setup(args)
        reconciler.reconcile(session)
        log.info("Reconciliation %s complete", session.id)
        print_dry_run_objects(session.deploy_manager)
