from substrate_manager.chain_spec import extract_chain_ids
from substrate_manager.config import ProjectConfig
from substrate_manager.inject import InjectionResult, inject_pallet
from substrate_manager.manifest import Manifest
from substrate_manager.materialize import CommitSnapshot, materialize
from substrate_manager.rename import PackageRename, rename_package
from substrate_manager.rewrite import rewrite_dependencies
from substrate_manager.templates import TemplateDescriptor, load_template

__all__ = [
    "CommitSnapshot",
    "InjectionResult",
    "Manifest",
    "PackageRename",
    "ProjectConfig",
    "TemplateDescriptor",
    "extract_chain_ids",
    "inject_pallet",
    "load_template",
    "materialize",
    "rename_package",
    "rewrite_dependencies",
]
