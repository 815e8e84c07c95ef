"""Image reference resolver for manifest streams

Rewrites container image placeholders (build target labels such as
``//app:image``) into published registry references. Documents are
traversed structurally: any mapping holding ``container``/``spec`` or
``containers``/``initContainers`` is treated as a container spec, whatever
kind of object it lives in.
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from ..api.exceptions import (
    ManifestDecodeError,
    MissingIdentityError,
    UnresolvedImageError,
)
from ..constants import (
    BUILD_TARGET_PREFIX,
    CONTAINER_LIST_KEYS,
    DIGEST_PREFIX,
    DOCUMENT_SEPARATOR,
    IMAGE_URL_ENV_MARKER,
    INIT_CONTAINERS_KEY,
    JSON_DOCUMENT_START,
    RELATIVE_TARGET_PREFIX,
    SINGLE_CONTAINER_KEYS,
)
from ..models.manifest import ManifestDocument, ManifestNode

logger = logging.getLogger(__name__)

SEPARATOR_LINE = re.compile(r"^---[ \t]*$", re.MULTILINE)


class ImageResolver:
    """Resolve image placeholders in YAML or JSON manifest streams"""

    def __init__(self, images: Optional[Dict[str, str]] = None):
        """
        Initialize resolver

        Args:
            images: Placeholder reference to registry reference mapping
        """
        self.images: Dict[str, str] = dict(images or {})

    def resolve_image_name(self, image_name: str) -> Optional[str]:
        """
        Look up the registry reference for an image name

        Tries an exact match first, then the name without a leading ``:``,
        then the name without a leading ``@``.

        Returns:
            Resolved reference or None if unresolved
        """
        if image_name in self.images:
            return self.images[image_name]

        if image_name.startswith(RELATIVE_TARGET_PREFIX):
            trimmed = image_name[len(RELATIVE_TARGET_PREFIX):]
            if trimmed in self.images:
                return self.images[trimmed]

        if image_name.startswith(DIGEST_PREFIX):
            trimmed = image_name[len(DIGEST_PREFIX):]
            if trimmed in self.images:
                return self.images[trimmed]

        return None

    def resolve_stream(self, stream: str) -> str:
        """
        Resolve every document of a ``---`` separated stream

        Nothing is returned unless every document resolves.

        Args:
            stream: YAML or JSON documents

        Returns:
            Re-serialized stream

        Raises:
            ManifestDecodeError: If a document cannot be decoded
            MissingIdentityError: If a document has no metadata.name or kind
            UnresolvedImageError: If a build target image has no mapping
        """
        rendered: List[str] = []
        for document in self._decode(stream):
            self.resolve_document(document)
            rendered.append(self._encode(document))
        return DOCUMENT_SEPARATOR.join(rendered)

    def resolve_file(self, infile: Union[str, Path], outfile: Union[str, Path]) -> int:
        """
        Resolve a manifest file into another file

        Returns:
            Number of documents written
        """
        content = Path(infile).read_text(encoding="utf-8")
        output = self.resolve_stream(content)
        Path(outfile).write_text(output, encoding="utf-8")
        count = output.count(DOCUMENT_SEPARATOR) + 1 if output else 0
        logger.debug(f"Resolved {count} document(s) from {infile} into {outfile}")
        return count

    def resolve_document(self, document: ManifestDocument) -> None:
        """Validate identity fields and rewrite images in place"""
        if not document.is_mapping or not document.name:
            raise MissingIdentityError("metadata.name", document.value)
        if not document.object_kind:
            raise MissingIdentityError("kind", document.value)
        self._find_and_replace(document)

    def _decode(self, stream: str) -> List[ManifestDocument]:
        """Decode each ``---`` chunk as JSON when it opens with ``{``, else as YAML"""
        documents = []
        for chunk in SEPARATOR_LINE.split(stream):
            text = chunk.strip()
            # Empty documents, e.g. after a trailing separator
            if not text:
                continue
            if text.startswith(JSON_DOCUMENT_START):
                try:
                    documents.append(ManifestDocument(json.loads(text)))
                except ValueError as e:
                    raise ManifestDecodeError(f"Unable to decode JSON manifest: {e}") from e
                continue
            try:
                values = list(yaml.safe_load_all(chunk))
            except yaml.YAMLError as e:
                raise ManifestDecodeError(f"Unable to decode manifest stream: {e}") from e
            documents.extend(ManifestDocument(value) for value in values if value is not None)
        return documents

    @staticmethod
    def _encode(document: ManifestDocument) -> str:
        return yaml.safe_dump(
            document.to_dict(),
            default_flow_style=False,
            sort_keys=True,
            allow_unicode=True,
        )

    def _find_and_replace(self, node: ManifestNode) -> None:
        """Rewrite container shapes at ``node``, descending unless it has ``initContainers``"""
        for key in SINGLE_CONTAINER_KEYS:
            container = node.mapping(key)
            if container is not None:
                self._update_container(container)

        for key in CONTAINER_LIST_KEYS:
            containers = node.sequence(key)
            if containers is not None:
                self._update_containers(containers)

        if node.get(INIT_CONTAINERS_KEY) is None:
            self._find_containers(node)

    def _find_containers(self, node: ManifestNode) -> None:
        for child in node.children():
            if child.is_mapping:
                self._find_and_replace(child)
            elif child.is_sequence:
                for item in child.elements():
                    if item.is_mapping:
                        self._find_and_replace(item)

    def _update_container(self, container: ManifestNode) -> None:
        self._update_container_env(container)
        image_name = container.string("image")
        if image_name is None:
            return
        self._replace_image(container, image_name)

    def _update_containers(self, containers: ManifestNode) -> None:
        for container in containers.elements():
            if not container.is_mapping:
                continue
            self._update_container_env(container)
            image_name = container.string("image")
            if image_name is None:
                continue
            self._replace_image(container, image_name)

    def _replace_image(self, container: ManifestNode, image_name: str) -> None:
        resolved = self.resolve_image_name(image_name)
        if resolved is not None:
            logger.debug(f"Resolved image {image_name} -> {resolved}")
            container.set("image", resolved)
        elif image_name.startswith(BUILD_TARGET_PREFIX):
            raise UnresolvedImageError(image_name)

    def _update_container_env(self, container: ManifestNode) -> None:
        """
        Resolve build targets referenced by ``*IMAGE_URL*`` env variables

        Only exact and ``:``-stripped keys are looked up here, and a miss
        writes an empty value. Scanning stops at the first malformed entry.
        """
        env = container.sequence("env")
        if env is None:
            return
        for entry in env.elements():
            if not entry.is_mapping:
                return
            env_name = entry.string("name")
            if env_name is None:
                return
            if IMAGE_URL_ENV_MARKER not in env_name:
                continue
            env_value = entry.string("value")
            if env_value is None:
                return
            if env_value.startswith(BUILD_TARGET_PREFIX):
                entry.set("value", self.images.get(env_value, ""))
            if env_value.startswith(RELATIVE_TARGET_PREFIX):
                entry.set("value", self.images.get(env_value[len(RELATIVE_TARGET_PREFIX):], ""))


def resolve_images(stream: str, images: Dict[str, str]) -> str:
    """Convenience wrapper around ImageResolver.resolve_stream"""
    return ImageResolver(images).resolve_stream(stream)
