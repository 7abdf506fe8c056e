import os
import unittest
from unittest import mock

from scribe_llm.config import ConfigSnapshot, ProviderProfile, Settings, resolve_provider

PRIMARY = ProviderProfile(endpoint_base="https://primary.example/v1", api_key="k-primary", model="m-primary")


class ResolveProviderTests(unittest.TestCase):
    def test_primary_returned_verbatim(self) -> None:
        secondary = ProviderProfile(endpoint_base="https://fast.example/v1", api_key="k-fast", model="m-fast")
        self.assertIs(resolve_provider(PRIMARY, secondary, use_secondary=False), PRIMARY)

    def test_fields_fall_back_independently(self) -> None:
        cases = [
            (ProviderProfile(), PRIMARY),
            (
                ProviderProfile(model="m-fast"),
                ProviderProfile(PRIMARY.endpoint_base, PRIMARY.api_key, "m-fast"),
            ),
            (
                ProviderProfile(api_key="k-fast"),
                ProviderProfile(PRIMARY.endpoint_base, "k-fast", PRIMARY.model),
            ),
            (
                ProviderProfile(endpoint_base="https://fast.example/v1", model="  "),
                ProviderProfile("https://fast.example/v1", PRIMARY.api_key, PRIMARY.model),
            ),
            (
                ProviderProfile("https://fast.example/v1", "k-fast", "m-fast"),
                ProviderProfile("https://fast.example/v1", "k-fast", "m-fast"),
            ),
        ]
        for secondary, expected in cases:
            with self.subTest(secondary=secondary):
                self.assertEqual(resolve_provider(PRIMARY, secondary, use_secondary=True), expected)

    def test_is_configured_depends_only_on_trimmed_key(self) -> None:
        self.assertFalse(ProviderProfile(endpoint_base="https://x", model="m").is_configured)
        self.assertFalse(ProviderProfile(api_key="   \t").is_configured)
        self.assertTrue(ProviderProfile(api_key="k").is_configured)


class SettingsTests(unittest.TestCase):
    def test_aliases_match_persisted_keys(self) -> None:
        settings = Settings.model_validate(
            {"aiProvider": "https://a/v1", "aiApiKey": "k", "aiModel": "m", "aliveModel": "fast"}
        )
        snapshot = settings.snapshot()
        self.assertEqual(snapshot.primary, ProviderProfile("https://a/v1", "k", "m"))
        self.assertEqual(snapshot.secondary, ProviderProfile("", "", "fast"))

    def test_snapshot_is_detached_from_later_mutation(self) -> None:
        settings = Settings(ai_api_key="k1", ai_model="m1")
        snapshot = settings.snapshot()
        settings.ai_api_key = "k2"
        self.assertIsInstance(snapshot, ConfigSnapshot)
        self.assertEqual(snapshot.primary.api_key, "k1")
        self.assertEqual(settings.snapshot().primary.api_key, "k2")

    def test_from_env_reads_prefixed_variables(self) -> None:
        env = {
            "SCRIBE_AI_PROVIDER": "https://env.example/v1",
            "SCRIBE_AI_API_KEY": " env-key ",
            "SCRIBE_ALIVE_MODEL": "env-fast",
        }
        with mock.patch.dict(os.environ, env, clear=False), mock.patch("scribe_llm.config.load_dotenv"):
            settings = Settings.from_env()
        self.assertEqual(settings.ai_provider, "https://env.example/v1")
        self.assertEqual(settings.ai_api_key, "env-key")
        self.assertEqual(settings.alive_model, "env-fast")


if __name__ == "__main__":
    unittest.main()
