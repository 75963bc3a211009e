"""Workflow services.

Services implement the release workflow, coordinating between the core
layer (core/) and infrastructure (git/, hosting/).
"""

from gitflow.services.branches import BranchManager, BranchRole, BranchType, DevelopLocation
from gitflow.services.gitflow import (
    CommitOptions,
    GitFlow,
    GitFlowState,
    PublishOptions,
    PublishReport,
    RepoInitOptions,
    create_gitflow,
)
from gitflow.services.notes import ReleaseNotesGenerator, classify, render_release_notes
from gitflow.services.remote import RemoteManager, parse_repo_slug
from gitflow.services.version import SemVer, VersionManager, VersionSuggestions, parse_version

__all__ = [
    # Orchestrator
    "CommitOptions",
    "GitFlow",
    "GitFlowState",
    "PublishOptions",
    "PublishReport",
    "RepoInitOptions",
    "create_gitflow",
    # Managers
    "BranchManager",
    "BranchRole",
    "BranchType",
    "DevelopLocation",
    "ReleaseNotesGenerator",
    "RemoteManager",
    "VersionManager",
    # Helpers
    "SemVer",
    "VersionSuggestions",
    "classify",
    "parse_repo_slug",
    "parse_version",
    "render_release_notes",
]
