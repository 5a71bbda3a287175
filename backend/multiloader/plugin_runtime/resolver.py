"""Entry point resolution.

Identifiers come from the package manifest and take one of these forms:

    pkg.module:callable   explicit attribute
    pkg.module            attribute `main`
    pkg.module.Name       attribute `Name` of `pkg.module` when `pkg.module.Name`
                          is not itself importable

Modules may register implementations on import with the `entry_point`
decorator; a registered identifier always wins over attribute lookup.
"""
from __future__ import annotations
import importlib, inspect
from dataclasses import dataclass
from typing import Optional, Tuple

from multiloader.core.config import Settings
from multiloader.core.errors import EntryPointResolutionError, MetadataMissingError
from multiloader.plugin_runtime.manifest import PackageManifest, describe_package, read_manifest
from multiloader.plugin_runtime.registry import EntryPoint, EntryPointRegistry, accepts_single_argument, as_entry_point, entry_points
from multiloader.plugin_runtime.scanner import ModulePackage

DEFAULT_ATTRIBUTE = 'main'


@dataclass(frozen=True)
class ResolvedEntryPoint:
    package: ModulePackage
    identifier: str
    entry: EntryPoint
    manifest: Optional[PackageManifest] = None

    @property
    def description(self) -> str:
        return describe_package(self.package.path, self.manifest)


def split_identifier(identifier: str) -> Tuple[str, str]:
    if ':' in identifier:
        module_name, _, attr = identifier.partition(':')
        return module_name.strip(), attr.strip()
    return identifier.strip(), DEFAULT_ATTRIBUTE


class EntryPointResolver:
    def __init__(self, settings: Settings, registry: EntryPointRegistry | None = None):
        self.settings = settings
        self.registry = registry if registry is not None else entry_points

    def read_manifest(self, package: ModulePackage) -> PackageManifest:
        """Return the package manifest; raises MetadataMissingError when it names no entry point."""
        manifest = read_manifest(package.path, self.settings.manifest_name, self.settings.entry_point_key)
        if manifest is None or not manifest.entry_point:
            raise MetadataMissingError(
                f"missing '{self.settings.entry_point_key}' in manifest of {package.path}",
                package=package.path,
            )
        return manifest

    def read_identifier(self, package: ModulePackage) -> str:
        return self.read_manifest(package).entry_point

    def resolve(self, package: ModulePackage, manifest: PackageManifest | None = None) -> ResolvedEntryPoint:
        if manifest is None:
            manifest = self.read_manifest(package)
        identifier = manifest.entry_point
        entry = self.bind(identifier, package)
        return ResolvedEntryPoint(package=package, identifier=identifier, entry=entry, manifest=manifest)

    def bind(self, identifier: str, package: ModulePackage) -> EntryPoint:
        registered = self.registry.get(identifier)
        if registered is not None:
            return registered

        module_name, attr = split_identifier(identifier)
        if not module_name or not attr:
            raise EntryPointResolutionError(
                f"malformed entry point '{identifier}' in {package.path}",
                package=package.path, entry_point=identifier,
            )
        module, attr = self._import(module_name, attr, identifier, package)

        # Importing the module may have registered the identifier.
        registered = self.registry.get(identifier)
        if registered is not None:
            return registered

        target = getattr(module, attr, None)
        if target is None:
            raise EntryPointResolutionError(
                f"entry point '{identifier}' has no attribute '{attr}' in module {module.__name__} ({package.path})",
                package=package.path, entry_point=identifier,
            )
        if inspect.isclass(target):
            if not callable(getattr(target, 'invoke', None)):
                raise EntryPointResolutionError(
                    f"entry point class '{identifier}' does not define invoke(args) ({package.path})",
                    package=package.path, entry_point=identifier,
                )
        elif not callable(target) or not accepts_single_argument(target):
            raise EntryPointResolutionError(
                f"entry point '{identifier}' is not callable with a single argument ({package.path})",
                package=package.path, entry_point=identifier,
            )
        try:
            return as_entry_point(identifier, target)
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            raise EntryPointResolutionError(
                f"entry point '{identifier}' could not be instantiated ({package.path}): {e}",
                package=package.path, entry_point=identifier,
            ) from e

    def _import(self, module_name: str, attr: str, identifier: str, package: ModulePackage):
        try:
            return importlib.import_module(module_name), attr
        except ModuleNotFoundError as e:
            parent, _, last = module_name.rpartition('.')
            if ':' not in identifier and parent and e.name == module_name:
                try:
                    return importlib.import_module(parent), last
                except KeyboardInterrupt:
                    raise
                except BaseException as parent_exc:
                    raise EntryPointResolutionError(
                        f"unable to import '{parent}' for entry point '{identifier}' ({package.path}): {parent_exc}",
                        package=package.path, entry_point=identifier,
                    ) from parent_exc
            raise EntryPointResolutionError(
                f"unable to find module '{module_name}' for entry point '{identifier}' ({package.path})",
                package=package.path, entry_point=identifier,
            ) from e
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            # Includes SystemExit raised while the module body runs.
            raise EntryPointResolutionError(
                f"unable to import module '{module_name}' for entry point '{identifier}' ({package.path}): {e}",
                package=package.path, entry_point=identifier,
            ) from e
