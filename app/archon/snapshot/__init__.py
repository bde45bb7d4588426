"""Snapshot engine for game save data.

This package captures configured save locations into zip archives and
restores them. Path resolution, copying, the manifest, the archive codec
and restore reconciliation each live in their own module; SnapshotService
ties them together for one game.

Public API:
- SnapshotService: Backup and restore orchestration for one game
- ResolverContext / resolve: Live location of a backup pattern
- copy_to_staging: Copy backup targets into a staging directory
- build_manifest / save_manifest / load_manifest: metadata.yaml I/O
- compress / extract / is_zip_file: Zip codec with extraction guards
- Reconciler / RestoreReport: Restore confirmation and replay
- DecisionRequest / AutoConfirm: Operator questions
- check_condition / confirm_clean / clear_directory: Backup-health gate
"""

from archon.snapshot.archive import compress, extract, is_zip_file
from archon.snapshot.copier import copy_to_staging
from archon.snapshot.decisions import AutoConfirm, Confirm, DecisionKind, DecisionRequest, ask
from archon.snapshot.health import (
    SnapshotFile,
    check_condition,
    clear_directory,
    confirm_clean,
    find_snapshots,
)
from archon.snapshot.manifest import (
    MANIFEST_FILENAME,
    MANIFEST_VERSION,
    build_manifest,
    load_manifest,
    save_manifest,
)
from archon.snapshot.reconcile import Reconciler, RestoreReport
from archon.snapshot.resolver import ResolverContext, current_os, resolve
from archon.snapshot.service import SnapshotService, build_context

__all__ = [
    "MANIFEST_FILENAME",
    "MANIFEST_VERSION",
    "AutoConfirm",
    "Confirm",
    "DecisionKind",
    "DecisionRequest",
    "Reconciler",
    "ResolverContext",
    "RestoreReport",
    "SnapshotFile",
    "SnapshotService",
    "ask",
    "build_context",
    "build_manifest",
    "check_condition",
    "clear_directory",
    "compress",
    "confirm_clean",
    "copy_to_staging",
    "current_os",
    "extract",
    "find_snapshots",
    "is_zip_file",
    "load_manifest",
    "resolve",
    "save_manifest",
]
