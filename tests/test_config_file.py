"""Tests for config file loading and priority."""

import logging
import os
import tempfile
from pathlib import Path
import unittest

from fast_bernoulli import config
from fast_bernoulli.errors import ConfigError
from fast_bernoulli.sampler import SamplerMode


def _clear_env():
    for key in list(os.environ.keys()):
        if key.startswith(config.ENV_PREFIX):
            del os.environ[key]


def _write_toml(content):
    with tempfile.NamedTemporaryFile(mode='w', suffix='.toml', delete=False) as f:
        f.write(content)
        return f.name


class TestConfigFileLoading(unittest.TestCase):
    """Test TOML config file loading."""

    def setUp(self):
        _clear_env()

    def test_load_toml_config_basic(self):
        """Test loading a basic TOML config file."""
        path = _write_toml("""
[sampling]
probability = 0.05
seed = 42

[logging]
debug = true
""")
        try:
            loaded = config.load_toml_config(path)

            self.assertEqual(loaded["sampling"]["probability"], 0.05)
            self.assertEqual(loaded["sampling"]["seed"], 42)
            self.assertTrue(loaded["logging"]["debug"])
        finally:
            os.unlink(path)

    def test_load_toml_config_missing_file(self):
        """Test that loading missing file returns empty dict."""
        loaded = config.load_toml_config("/nonexistent/file.toml")
        self.assertEqual(loaded, {})

    def test_load_toml_config_invalid_toml(self):
        """Test that invalid TOML raises ConfigError."""
        path = _write_toml("invalid [toml content")
        try:
            with self.assertRaises(ConfigError):
                config.load_toml_config(path)
        finally:
            os.unlink(path)

    def test_find_config_file_current_directory(self):
        """Test finding config file in current directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "fast_bernoulli.toml"
            config_path.write_text("[sampling]\nprobability = 0.5")

            original_cwd = os.getcwd()
            try:
                os.chdir(tmpdir)

                found = config.find_config_file()
                self.assertIsNotNone(found)
                self.assertEqual(Path(found).name, "fast_bernoulli.toml")
            finally:
                os.chdir(original_cwd)

    def test_find_config_file_without_local_file(self):
        """Without a local file the lookup returns None or the home config path."""
        original_cwd = os.getcwd()
        with tempfile.TemporaryDirectory() as tmpdir:
            try:
                os.chdir(tmpdir)

                found = config.find_config_file()
                self.assertTrue(found is None or isinstance(found, str))
            finally:
                os.chdir(original_cwd)


class TestConfigPriority(unittest.TestCase):
    """Test configuration loading priority."""

    def setUp(self):
        _clear_env()

    def tearDown(self):
        _clear_env()

    def test_explicit_params_override_env(self):
        os.environ["FAST_BERNOULLI_PROBABILITY"] = "0.2"

        merged = config.load_config_with_priority(
            config_file="/nonexistent/file.toml",
            overrides={"sampling": {"probability": 0.9}},
        )

        self.assertEqual(merged["probability"], 0.9)

    def test_env_overrides_config_file(self):
        path = _write_toml("""
[sampling]
probability = 0.5
seed = 7
""")
        try:
            os.environ["FAST_BERNOULLI_PROBABILITY"] = "0.7"

            merged = config.load_config_with_priority(config_file=path)

            self.assertEqual(merged["probability"], 0.7)
            self.assertEqual(merged["seed"], 7)
        finally:
            os.unlink(path)

    def test_defaults(self):
        loaded = config.load_config(config_file="/nonexistent/file.toml")

        self.assertEqual(loaded.sampling.probability, 1.0)
        self.assertIsNone(loaded.sampling.seed)
        self.assertFalse(loaded.logging.debug)
        self.assertEqual(loaded.logging.level, "WARNING")

    def test_out_of_range_probability_is_invalid(self):
        for probability in (1.5, -0.1):
            is_valid, msg, loaded = config.validate_config(
                config_file="/nonexistent/file.toml",
                overrides={"sampling": {"probability": probability}},
            )
            self.assertFalse(is_valid)
            self.assertIsNone(loaded)
            self.assertIn("probability", msg)

        with self.assertRaises(ConfigError):
            config.load_config(
                config_file="/nonexistent/file.toml",
                overrides={"sampling": {"probability": 1.5}},
            )

    def test_unknown_log_level_is_invalid(self):
        is_valid, _msg, _loaded = config.validate_config(
            config_file="/nonexistent/file.toml",
            overrides={"logging": {"level": "chatty"}},
        )
        self.assertFalse(is_valid)

    def test_valid_config(self):
        is_valid, msg, loaded = config.validate_config(
            config_file="/nonexistent/file.toml",
            overrides={"sampling": {"probability": 0.25}, "logging": {"level": "info"}},
        )
        self.assertTrue(is_valid)
        self.assertEqual(msg, "Configuration is valid")
        self.assertEqual(loaded.logging.level, "INFO")


class TestConfigFromEnv(unittest.TestCase):
    """Test loading configuration from environment variables."""

    def setUp(self):
        _clear_env()

    def tearDown(self):
        _clear_env()

    def test_load_config_from_env_all_vars(self):
        os.environ.update({
            "FAST_BERNOULLI_PROBABILITY": "0.9",
            "FAST_BERNOULLI_SEED": "11",
            "FAST_BERNOULLI_DEBUG": "yes",
            "FAST_BERNOULLI_LOG_LEVEL": "info",
        })

        env_config = config.load_config_from_env(flat=True)

        self.assertEqual(env_config["probability"], 0.9)
        self.assertEqual(env_config["seed"], 11)
        self.assertTrue(env_config["debug"])
        self.assertEqual(env_config["level"], "info")

        nested = config.load_config_from_env()
        self.assertEqual(nested["sampling"]["probability"], 0.9)
        self.assertTrue(nested["logging"]["debug"])

    def test_boolean_conversion(self):
        os.environ["FAST_BERNOULLI_DEBUG"] = "0"
        self.assertFalse(config.load_config_from_env(flat=True)["debug"])

        os.environ["FAST_BERNOULLI_DEBUG"] = "maybe"
        with self.assertRaises(ConfigError):
            config.load_config_from_env()

    def test_bad_number(self):
        os.environ["FAST_BERNOULLI_PROBABILITY"] = "half"
        with self.assertRaises(ConfigError):
            config.load_config_from_env()

    def test_load_config_from_env_missing_vars(self):
        self.assertEqual(config.load_config_from_env(), {})


class TestBuildSampler(unittest.TestCase):

    def setUp(self):
        _clear_env()

    def test_seeded_samplers_agree(self):
        loaded = config.load_config(
            config_file="/nonexistent/file.toml",
            overrides={"sampling": {"probability": 0.1, "seed": 3}},
        )
        sampler_a, rng_a = config.build_sampler(loaded)
        sampler_b, rng_b = config.build_sampler(loaded)

        self.assertEqual(sampler_a.probability, 0.1)
        self.assertEqual(
            [sampler_a.trial(rng_a) for _ in range(1000)],
            [sampler_b.trial(rng_b) for _ in range(1000)],
        )

    def test_degenerate_probability(self):
        loaded = config.load_config(
            config_file="/nonexistent/file.toml",
            overrides={"sampling": {"probability": 0}},
        )
        sampler, _rng = config.build_sampler(loaded)
        self.assertIs(sampler.mode, SamplerMode.NEVER)

    def test_configure_logging(self):
        package_logger = logging.getLogger("fast_bernoulli")
        original_level = package_logger.level
        try:
            loaded = config.load_config(
                config_file="/nonexistent/file.toml",
                overrides={"logging": {"debug": True}},
            )
            config.configure_logging(loaded)
            self.assertEqual(package_logger.level, logging.DEBUG)

            loaded = config.load_config(
                config_file="/nonexistent/file.toml",
                overrides={"logging": {"level": "error"}},
            )
            config.configure_logging(loaded)
            self.assertEqual(package_logger.level, logging.ERROR)
        finally:
            package_logger.setLevel(original_level)


if __name__ == "__main__":
    unittest.main()
