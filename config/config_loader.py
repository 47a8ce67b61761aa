# config/config_loader.py
"""
Config loader module for modular YAML configuration.
"""

from dataclasses import fields
from pathlib import Path

import yaml

from components.physics.motor_state import MotorParameters

DEFAULT_RUNTIME = {
    "poll_interval": 0.1,
    "fixed_dt": 0.1,
    "broadcast_every_n_ticks": 20,
    "log_dir": "logs",
}

DEFAULT_NOTIFIER = {
    "type": "broadcast",
    "group": "MotorClients",
    "queue_size": 100,
}


class ConfigLoader:
    """Loads and merges modular configuration files."""

    def __init__(self, config_dir="config"):
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load_all(self):
        """Load all configuration files and merge them."""
        config = {}

        # Load simulation config
        simulation_path = self.config_dir / "simulation.yml"
        if simulation_path.exists():
            simulation_data = self._read_yaml(simulation_path)
            simulation = simulation_data.get("simulation") or {}
            runtime = dict(DEFAULT_RUNTIME)
            runtime.update(simulation.get("runtime") or {})
            config["simulation"] = {**simulation, "runtime": runtime}
        else:
            config["simulation"] = self._create_default_simulation()
            self._save_simulation(config["simulation"])

        # Load motor config
        motor_path = self.config_dir / "motor.yml"
        if motor_path.exists():
            motor_data = self._read_yaml(motor_path)
            config["motor"] = motor_data.get("motor") or {}
        else:
            config["motor"] = {}

        # Load notifier config
        notifier_path = self.config_dir / "notifier.yml"
        notifier = dict(DEFAULT_NOTIFIER)
        if notifier_path.exists():
            notifier_data = self._read_yaml(notifier_path)
            notifier.update(notifier_data.get("notifier") or {})
        config["notifier"] = notifier

        return config

    def motor_parameters(self, config=None):
        """Build MotorParameters from the motor section.

        Unknown keys are rejected so typos don't pass silently.

        Raises:
            ValueError: If the motor section has unknown keys
        """
        if config is None:
            config = self.load_all()
        motor_cfg = config.get("motor", {})

        known = {f.name for f in fields(MotorParameters)}
        unknown = set(motor_cfg) - known
        if unknown:
            raise ValueError(
                f"Unknown motor parameters in motor.yml: {sorted(unknown)}"
            )

        return MotorParameters(**{k: float(v) for k, v in motor_cfg.items()})

    def _read_yaml(self, path):
        with open(path) as f:
            return yaml.safe_load(f) or {}

    def _create_default_simulation(self):
        """Create default simulation configuration."""
        return {"runtime": dict(DEFAULT_RUNTIME)}

    def _save_simulation(self, simulation):
        """Save simulation configuration to file."""
        simulation_path = self.config_dir / "simulation.yml"
        with open(simulation_path, "w") as f:
            yaml.dump({"simulation": simulation}, f, default_flow_style=False)
        print(f"[INFO] Created default simulation config at {simulation_path}")
