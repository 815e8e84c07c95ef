"""Unit tests for the manifest image resolver."""

import json

import pytest
import yaml

from gitops_tool.api.exceptions import (
    ManifestDecodeError,
    MissingIdentityError,
    UnresolvedImageError,
)
from gitops_tool.core.image_resolver import ImageResolver, resolve_images

DEPLOYMENT = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: web
spec:
  replicas: 2
  template:
    spec:
      initContainers:
      - name: migrate
        image: //app:migrate
      containers:
      - name: app
        image: //app:image
      - name: sidecar
        image: envoyproxy/envoy:v1.29
"""

IMAGES = {
    "//app:image": "registry.example.com/app@sha256:aaa",
    "//app:migrate": "registry.example.com/migrate@sha256:bbb",
}


def load_all(stream):
    return [doc for doc in yaml.safe_load_all(stream) if doc is not None]


class TestResolveImageName:
    def setup_method(self):
        self.resolver = ImageResolver({"//app:image": "reg/app:1", "img": "reg/img:2"})

    def test_exact_match(self):
        assert self.resolver.resolve_image_name("//app:image") == "reg/app:1"

    def test_colon_prefix_stripped(self):
        assert self.resolver.resolve_image_name(":img") == "reg/img:2"

    def test_digest_prefix_stripped(self):
        assert self.resolver.resolve_image_name("@img") == "reg/img:2"

    def test_unknown_name(self):
        assert self.resolver.resolve_image_name("nginx:1.25") is None


class TestResolveStream:
    def test_deployment_containers_and_init_containers(self):
        output = ImageResolver(IMAGES).resolve_stream(DEPLOYMENT)
        doc = load_all(output)[0]
        pod_spec = doc["spec"]["template"]["spec"]

        assert pod_spec["containers"][0]["image"] == "registry.example.com/app@sha256:aaa"
        assert pod_spec["initContainers"][0]["image"] == "registry.example.com/migrate@sha256:bbb"
        # Registry images pass through untouched
        assert pod_spec["containers"][1]["image"] == "envoyproxy/envoy:v1.29"
        assert doc["spec"]["replicas"] == 2

    def test_output_is_canonical_yaml(self):
        output = ImageResolver(IMAGES).resolve_stream(DEPLOYMENT)
        assert output == yaml.safe_dump(
            load_all(output)[0], default_flow_style=False, sort_keys=True
        )
        assert output.index("apiVersion") < output.index("kind") < output.index("metadata")

    def test_multiple_documents_keep_separators(self):
        stream = DEPLOYMENT + "---\n" + DEPLOYMENT.replace("name: web", "name: api")
        output = ImageResolver(IMAGES).resolve_stream(stream)

        assert output.count("---\n") == 1
        assert [doc["metadata"]["name"] for doc in load_all(output)] == ["web", "api"]

    def test_empty_documents_are_skipped(self):
        stream = "---\n" + DEPLOYMENT + "---\n"
        output = ImageResolver(IMAGES).resolve_stream(stream)

        assert "---" not in output
        assert len(load_all(output)) == 1

    def test_json_input(self):
        stream = (
            '{"kind": "Pod", "metadata": {"name": "p"}, '
            '"spec": {"containers": [{"name": "c", "image": "//app:image"}]}}'
        )
        doc = load_all(ImageResolver(IMAGES).resolve_stream(stream))[0]
        assert doc["spec"]["containers"][0]["image"] == IMAGES["//app:image"]

    def test_tab_indented_json(self):
        pod = {
            "kind": "Pod",
            "metadata": {"name": "p"},
            "spec": {"containers": [{"name": "c", "image": "//app:image"}]},
        }
        stream = json.dumps(pod, indent="\t") + "\n---\n" + DEPLOYMENT
        docs = load_all(ImageResolver(IMAGES).resolve_stream(stream))

        assert docs[0]["spec"]["containers"][0]["image"] == IMAGES["//app:image"]
        assert docs[1]["metadata"]["name"] == "web"

    def test_invalid_json(self):
        with pytest.raises(ManifestDecodeError):
            ImageResolver(IMAGES).resolve_stream('{"kind": "Pod",')

    def test_convenience_function(self):
        output = resolve_images(DEPLOYMENT, IMAGES)
        assert "//app:image" not in output


class TestContainerShapes:
    def test_single_spec_container(self):
        stream = """\
kind: KnativeService
metadata:
  name: fn
spec:
  image: //app:image
"""
        doc = load_all(ImageResolver(IMAGES).resolve_stream(stream))[0]
        assert doc["spec"]["image"] == IMAGES["//app:image"]

    def test_single_named_container(self):
        stream = """\
kind: Job
metadata:
  name: job
template:
  container:
    image: :image
"""
        doc = load_all(ImageResolver({"image": "reg/job:3"}).resolve_stream(stream))[0]
        assert doc["template"]["container"]["image"] == "reg/job:3"

    def test_descent_continues_past_containers(self):
        stream = """\
kind: Custom
metadata:
  name: c
spec:
  containers:
  - image: //app:image
  sidecar:
    containers:
    - image: //other:image
"""
        with pytest.raises(UnresolvedImageError) as exc_info:
            ImageResolver(IMAGES).resolve_stream(stream)
        assert exc_info.value.image == "//other:image"

        images = dict(IMAGES, **{"//other:image": "reg/other:1"})
        doc = load_all(ImageResolver(images).resolve_stream(stream))[0]
        assert doc["spec"]["containers"][0]["image"] == IMAGES["//app:image"]
        assert doc["spec"]["sidecar"]["containers"][0]["image"] == "reg/other:1"

    def test_descent_stops_below_init_containers(self):
        stream = """\
kind: Custom
metadata:
  name: c
initContainers:
- image: //app:migrate
extra:
  containers:
  - image: //other:image
"""
        doc = load_all(ImageResolver(IMAGES).resolve_stream(stream))[0]
        assert doc["initContainers"][0]["image"] == IMAGES["//app:migrate"]
        assert doc["extra"]["containers"][0]["image"] == "//other:image"

    def test_containers_inside_sequences(self):
        stream = """\
kind: List
metadata:
  name: many
items:
- spec:
    containers:
    - image: //app:image
"""
        doc = load_all(ImageResolver(IMAGES).resolve_stream(stream))[0]
        assert doc["items"][0]["spec"]["containers"][0]["image"] == IMAGES["//app:image"]


class TestEnvironmentRewrite:
    def _env(self, images, env):
        stream = yaml.safe_dump({
            "kind": "Pod",
            "metadata": {"name": "p"},
            "spec": {"containers": [{"name": "c", "image": "nginx", "env": env}]},
        })
        doc = load_all(ImageResolver(images).resolve_stream(stream))[0]
        return doc["spec"]["containers"][0]["env"]

    def test_build_target_resolved(self):
        env = self._env(IMAGES, [{"name": "APP_IMAGE_URL", "value": "//app:image"}])
        assert env[0]["value"] == IMAGES["//app:image"]

    def test_relative_target_resolved(self):
        env = self._env({"img": "reg/img:2"}, [{"name": "IMAGE_URL", "value": ":img"}])
        assert env[0]["value"] == "reg/img:2"

    def test_unresolved_target_becomes_empty(self):
        env = self._env({}, [{"name": "SIDECAR_IMAGE_URL", "value": "//missing:image"}])
        assert env[0]["value"] == ""

    def test_digest_prefix_not_looked_up(self):
        env = self._env({"img": "reg/img:2"}, [{"name": "IMAGE_URL", "value": "@img"}])
        assert env[0]["value"] == "@img"

    def test_other_variables_untouched(self):
        env = self._env(IMAGES, [
            {"name": "LOG_LEVEL", "value": "//app:image"},
            {"name": "APP_IMAGE_URL", "value": "//app:image"},
        ])
        assert env[0]["value"] == "//app:image"
        assert env[1]["value"] == IMAGES["//app:image"]

    def test_scan_stops_at_malformed_entry(self):
        env = self._env(IMAGES, [
            {"name": "BROKEN_IMAGE_URL"},
            {"name": "APP_IMAGE_URL", "value": "//app:image"},
        ])
        assert env[1]["value"] == "//app:image"


class TestErrors:
    def test_unresolved_build_target(self):
        with pytest.raises(UnresolvedImageError) as exc_info:
            ImageResolver({}).resolve_stream(DEPLOYMENT)
        assert exc_info.value.image.startswith("//app:")
        assert "Unresolved image found" in str(exc_info.value)

    def test_unresolved_single_container(self):
        stream = "kind: Svc\nmetadata:\n  name: s\nspec:\n  image: //nope:image\n"
        with pytest.raises(UnresolvedImageError):
            ImageResolver(IMAGES).resolve_stream(stream)

    def test_missing_name(self):
        with pytest.raises(MissingIdentityError) as exc_info:
            ImageResolver(IMAGES).resolve_stream("kind: Pod\nmetadata: {}\n")
        assert exc_info.value.field_name == "metadata.name"

    def test_missing_kind(self):
        with pytest.raises(MissingIdentityError) as exc_info:
            ImageResolver(IMAGES).resolve_stream("metadata:\n  name: p\n")
        assert exc_info.value.field_name == "kind"

    def test_non_mapping_document(self):
        with pytest.raises(MissingIdentityError):
            ImageResolver(IMAGES).resolve_stream("- a\n- b\n")

    def test_decode_error(self):
        with pytest.raises(ManifestDecodeError):
            ImageResolver(IMAGES).resolve_stream("kind: [unclosed\n")

    def test_nothing_returned_on_failure(self, tmp_path):
        outfile = tmp_path / "out.yaml"
        stream = DEPLOYMENT + "---\nkind: Pod\nmetadata: {}\n"
        infile = tmp_path / "in.yaml"
        infile.write_text(stream)

        with pytest.raises(MissingIdentityError):
            ImageResolver(IMAGES).resolve_file(infile, outfile)
        assert not outfile.exists()


class TestResolveFile:
    def test_writes_resolved_stream(self, tmp_path):
        infile = tmp_path / "in.yaml"
        outfile = tmp_path / "out.yaml"
        infile.write_text(DEPLOYMENT + "---\n" + DEPLOYMENT.replace("name: web", "name: api"))

        count = ImageResolver(IMAGES).resolve_file(infile, outfile)

        assert count == 2
        assert "//app" not in outfile.read_text()
