# SPDX-License-Identifier: BUSL-1.1
"""Tests for stack config loading, lookups, and workspace files."""

import sys
import tempfile
import textwrap
import unittest
from pathlib import Path

import yaml

# Ensure the aostack package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from aostack.config.loader import (
    ConfigError, ConfigMissingError, ConfigStore, Workspace, qualify,
)
from aostack.config.resources import (
    CleanupSpec, ProjectSettings, resource_from_dict, resource_to_dict,
)
from aostack.config.values import ABSENT, Plain, Secret, Sensitive


class TestConfigStoreLookup(unittest.TestCase):
    def setUp(self):
        self.store = ConfigStore({
            "app:AO_PORT": 8080,
            "app:AO_DEBUG": False,
            "app:AO_RATIO": 0.5,
            "app:AO_NAME": "orchestrator",
            "app:AO_TOKEN": {"secure": "t0k"},
            "app:AO_NULL": None,
            "app:AO_LIST": ["a", "b"],
            "app:AO_MAP": {"value": "x"},
        })

    def test_scalars_are_plain_strings(self):
        self.assertEqual(self.store.lookup("app:AO_PORT"), Plain("8080"))
        self.assertEqual(self.store.lookup("app:AO_DEBUG"), Plain("false"))
        self.assertEqual(self.store.lookup("app:AO_RATIO"), Plain("0.5"))
        self.assertEqual(self.store.lookup("app:AO_NAME"), Plain("orchestrator"))

    def test_secure_mapping_is_sensitive(self):
        result = self.store.lookup("app:AO_TOKEN")
        self.assertIsInstance(result, Sensitive)
        self.assertEqual(result.handle.reveal(), "t0k")

    def test_unusable_values_are_absent(self):
        for key in ("app:AO_NULL", "app:AO_LIST", "app:AO_MAP", "app:MISSING"):
            self.assertIs(self.store.lookup(key), ABSENT)

    def test_keys_enumerates_everything(self):
        self.assertEqual(len(self.store.keys()), 8)
        self.assertIn("app:AO_TOKEN", self.store.keys())

    def test_unqualified_keys_get_project_namespace(self):
        store = ConfigStore({"AO_PORT": "1", "other:AO_PORT": "2"}, project="app")
        self.assertEqual(sorted(store.keys()), ["app:AO_PORT", "other:AO_PORT"])

    def test_key_given_both_forms_raises(self):
        with self.assertRaises(ConfigError) as ctx:
            ConfigStore({"AO_X": "1", "app:AO_X": "2"}, project="app")
        self.assertIn("app:AO_X", str(ctx.exception))

    def test_qualify(self):
        self.assertEqual(qualify("AO_X", "app"), "app:AO_X")
        self.assertEqual(qualify("ns:AO_X", "app"), "ns:AO_X")


class TestConfigView(unittest.TestCase):
    def setUp(self):
        store = ConfigStore({"app:PLAIN": "v", "app:SECRET": {"secure": "s"}})
        self.config = store.config("app")

    def test_get_only_returns_plain(self):
        self.assertEqual(self.config.get("PLAIN"), "v")
        self.assertIsNone(self.config.get("SECRET"))
        self.assertIsNone(self.config.get("NOPE"))

    def test_get_secret_only_returns_secrets(self):
        self.assertIsInstance(self.config.get_secret("SECRET"), Secret)
        self.assertIsNone(self.config.get_secret("PLAIN"))

    def test_require_raises_when_missing(self):
        self.assertEqual(self.config.require("PLAIN"), "v")
        with self.assertRaises(ConfigMissingError) as ctx:
            self.config.require("SECRET")
        self.assertEqual(ctx.exception.key, "app:SECRET")

    def test_require_secret_raises_for_plain(self):
        self.assertEqual(self.config.require_secret("SECRET").reveal(), "s")
        with self.assertRaises(ConfigMissingError) as ctx:
            self.config.require_secret("PLAIN")
        self.assertTrue(ctx.exception.secret)
        self.assertIn("secret", str(ctx.exception))


class TestConfigStoreLoad(unittest.TestCase):
    def test_load_stack_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "dev.yaml"
            path.write_text(textwrap.dedent("""\
                config:
                  agent-orchestrator:AO_PORT: "8080"
                  AO_GITHUB_TOKEN:
                    secure: ghp_abc
            """))
            store = ConfigStore.load(path, "agent-orchestrator")
            self.assertEqual(
                sorted(store.keys()),
                ["agent-orchestrator:AO_GITHUB_TOKEN", "agent-orchestrator:AO_PORT"],
            )
            self.assertIsInstance(store.lookup("agent-orchestrator:AO_GITHUB_TOKEN"), Sensitive)

    def test_missing_file_is_empty(self):
        store = ConfigStore.load(Path("/nonexistent/stack.yaml"), "app")
        self.assertEqual(store.keys(), [])

    def test_invalid_yaml_raises_config_error(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yaml"
            path.write_text("config: [unclosed\n")
            with self.assertRaises(ConfigError):
                ConfigStore.load(path, "app")

    def test_non_mapping_config_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yaml"
            path.write_text("config:\n  - a\n  - b\n")
            with self.assertRaises(ConfigError):
                ConfigStore.load(path, "app")

    def test_non_mapping_document_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yaml"
            path.write_text("- config\n")
            with self.assertRaises(ConfigError):
                ConfigStore.load(path, "app")

    def test_numeric_and_boolean_text_is_kept(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "dev.yaml"
            path.write_text(textwrap.dedent("""\
                config:
                  AO_VERSION: 1.10
                  AO_REGION: no
                  AO_PORT: 8080
                  AO_EMPTY: null
            """))
            config = ConfigStore.load(path, "app").config("app")
            self.assertEqual(config.get("AO_VERSION"), "1.10")
            self.assertEqual(config.get("AO_REGION"), "no")
            self.assertEqual(config.get("AO_PORT"), "8080")
            self.assertIs(config.lookup("AO_EMPTY"), ABSENT)

    def test_same_key_in_both_forms_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "dev.yaml"
            path.write_text(textwrap.dedent("""\
                config:
                  AO_X: "1"
                  app:AO_X: "2"
            """))
            with self.assertRaises(ConfigError) as ctx:
                ConfigStore.load(path, "app")
            self.assertIn("app:AO_X", str(ctx.exception))


class TestProjectSettingsSerialization(unittest.TestCase):
    def test_defaults(self):
        s = ProjectSettings()
        self.assertEqual(s.name, "agent-orchestrator")
        self.assertEqual(s.prefix, "AO_")
        self.assertIn("AO_KUBECONFIG", s.required)
        self.assertEqual(s.namespaces.control_plane, "agents-control-plane")
        self.assertEqual(s.cleanup.phases, ["Succeeded", "Failed"])

    def test_to_dict_uses_camel_case(self):
        d = resource_to_dict(ProjectSettings())
        self.assertEqual(d["apiVersion"], "aostack/v1")
        self.assertEqual(d["kind"], "Project")
        self.assertEqual(d["metadata"], {"name": "agent-orchestrator"})
        self.assertIn("controlPlane", d["spec"]["namespaces"])
        self.assertIn("imagePullPolicy", d["spec"]["orchestrator"])

    def test_from_dict_accepts_partial_spec(self):
        s = resource_from_dict({
            "apiVersion": "aostack/v1",
            "kind": "Project",
            "metadata": {"name": "my-app"},
            "spec": {
                "prefix": "MA_",
                "orchestrator": {"port": 9090, "imagePullPolicy": "IfNotPresent"},
                "cleanup": {"schedule": "*/30 * * * *"},
            },
        })
        self.assertEqual(s.name, "my-app")
        self.assertEqual(s.prefix, "MA_")
        self.assertEqual(s.orchestrator.port, 9090)
        self.assertEqual(s.orchestrator.image_pull_policy, "IfNotPresent")
        self.assertEqual(s.cleanup.schedule, "*/30 * * * *")
        self.assertEqual(s.cleanup.image, CleanupSpec().image)
        self.assertEqual(s.namespaces.agents, "agents")

    def test_unknown_kind_rejected(self):
        with self.assertRaises(ValueError):
            resource_from_dict({"kind": "Environment", "spec": {}})

    def test_wrongly_typed_fields_rejected(self):
        bad_specs = [
            {"prefix": None},
            {"prefix": 5},
            {"namespaces": None},
            {"namespaces": ["agents"]},
            {"orchestrator": {"port": "80"}},
            {"orchestrator": {"replicas": True}},
            {"required": "AO_KUBECONFIG"},
            {"cleanup": {"phases": [1, 2]}},
        ]
        for spec in bad_specs:
            with self.subTest(spec=spec):
                with self.assertRaises(ValueError):
                    resource_from_dict({"kind": "Project", "spec": spec})

    def test_non_mapping_spec_rejected(self):
        with self.assertRaises(ValueError):
            resource_from_dict({"kind": "Project", "spec": ["prefix"]})


class TestWorkspace(unittest.TestCase):
    def test_defaults_when_uninitialized(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            ws = Workspace(Path(tmpdir))
            self.assertFalse(ws.is_initialized())
            self.assertEqual(ws.load_settings().name, "agent-orchestrator")

    def test_settings_saved_and_reloaded(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = ProjectSettings(name="demo", prefix="DM_")
            settings.orchestrator.replicas = 3
            Workspace(Path(tmpdir)).save_settings(settings)

            loaded = Workspace(Path(tmpdir)).load_settings()
            self.assertEqual(loaded.name, "demo")
            self.assertEqual(loaded.prefix, "DM_")
            self.assertEqual(loaded.orchestrator.replicas, 3)

    def test_set_and_remove_values(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            ws = Workspace(Path(tmpdir))
            ws.set_value("dev", "AO_PORT", "8080")
            ws.set_value("dev", "AO_TOKEN", "abc", secret=True)

            with open(ws.stack_path("dev")) as f:
                data = yaml.safe_load(f)
            self.assertEqual(data["config"]["agent-orchestrator:AO_PORT"], "8080")
            self.assertEqual(
                data["config"]["agent-orchestrator:AO_TOKEN"], {"secure": "abc"},
            )

            store = ws.load_store("dev")
            self.assertEqual(store.config("agent-orchestrator").get("AO_PORT"), "8080")
            self.assertEqual(ws.list_stacks(), ["dev"])

            self.assertTrue(ws.remove_value("dev", "AO_PORT"))
            self.assertFalse(ws.remove_value("dev", "AO_PORT"))
            self.assertFalse(ws.remove_value("prod", "AO_PORT"))
            self.assertEqual(
                ws.load_store("dev").keys(), ["agent-orchestrator:AO_TOKEN"],
            )

    def test_invalid_settings_file_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            ws = Workspace(Path(tmpdir))
            ws.project_file.write_text("kind: Unknown\n")
            with self.assertRaises(ConfigError):
                ws.load_settings()

    def test_null_settings_fields_raise(self):
        for spec in ("  prefix:\n", "  namespaces: null\n",
                     "  orchestrator:\n    port: true\n"):
            with self.subTest(spec=spec), tempfile.TemporaryDirectory() as tmpdir:
                ws = Workspace(Path(tmpdir))
                ws.project_file.write_text("kind: Project\nspec:\n" + spec)
                with self.assertRaises(ConfigError):
                    ws.load_settings()

    def test_non_mapping_settings_file_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            ws = Workspace(Path(tmpdir))
            ws.project_file.write_text("- Project\n")
            with self.assertRaises(ConfigError):
                ws.load_settings()

    def test_set_and_remove_reject_malformed_stack_file(self):
        for content in ("config: [unclosed\n", "config:\n  - a\n", "- a\n"):
            with self.subTest(content=content), tempfile.TemporaryDirectory() as tmpdir:
                ws = Workspace(Path(tmpdir))
                ws.ensure_dirs()
                ws.stack_path("dev").write_text(content)
                with self.assertRaises(ConfigError):
                    ws.set_value("dev", "AO_PORT", "8080")
                with self.assertRaises(ConfigError):
                    ws.remove_value("dev", "AO_PORT")
                self.assertEqual(ws.stack_path("dev").read_text(), content)

    def test_set_value_keeps_scalar_text_of_other_entries(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            ws = Workspace(Path(tmpdir))
            ws.ensure_dirs()
            ws.stack_path("dev").write_text(
                "config:\n  AO_VERSION: 1.10\n  AO_REGION: no\n"
            )
            ws.set_value("dev", "AO_PORT", "8080")
            config = ws.load_store("dev").config("agent-orchestrator")
            self.assertEqual(config.get("AO_VERSION"), "1.10")
            self.assertEqual(config.get("AO_REGION"), "no")
            self.assertEqual(config.get("AO_PORT"), "8080")

    def test_set_value_replaces_unqualified_entry(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            ws = Workspace(Path(tmpdir))
            ws.ensure_dirs()
            ws.stack_path("dev").write_text("config:\n  AO_PORT: \"80\"\n")
            ws.set_value("dev", "AO_PORT", "8080")

            store = ws.load_store("dev")
            self.assertEqual(store.keys(), ["agent-orchestrator:AO_PORT"])
            self.assertEqual(store.config("agent-orchestrator").get("AO_PORT"), "8080")

    def test_remove_value_removes_unqualified_entry(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            ws = Workspace(Path(tmpdir))
            ws.ensure_dirs()
            ws.stack_path("dev").write_text("config:\n  AO_PORT: \"80\"\n")
            self.assertTrue(ws.remove_value("dev", "agent-orchestrator:AO_PORT"))
            self.assertEqual(ws.load_store("dev").keys(), [])


if __name__ == "__main__":
    unittest.main()
