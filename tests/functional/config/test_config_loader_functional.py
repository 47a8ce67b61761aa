import pytest
import yaml

from config.config_loader import ConfigLoader
from tools.simulator_manager import SimulatorManager


def test_save_simulation_creates_file_and_logs(tmp_path, capsys):
    """
    Functional test: _save_simulation() writes simulation.yml
    and prints the creation message.
    """
    loader = ConfigLoader(config_dir=tmp_path)

    simulation = {"runtime": {"poll_interval": 0.2, "fixed_dt": 0.1}}

    loader._save_simulation(simulation)

    simulation_file = tmp_path / "simulation.yml"
    assert simulation_file.exists()

    with open(simulation_file) as f:
        data = yaml.safe_load(f)
    assert data["simulation"] == simulation

    captured = capsys.readouterr()
    assert f"Created default simulation config at {simulation_file}" in captured.out


def test_load_all_creates_default_once(tmp_path, capsys):
    """
    Functional test: load_all() writes simulation.yml only when it is missing.
    """
    loader = ConfigLoader(config_dir=tmp_path)
    config = loader.load_all()

    simulation_file = tmp_path / "simulation.yml"
    assert simulation_file.exists()
    assert "Created default simulation config" in capsys.readouterr().out

    with open(simulation_file) as f:
        file_data = yaml.safe_load(f)
    assert file_data["simulation"] == config["simulation"]

    # Second load reads the file back without recreating it
    assert loader.load_all() == config
    assert capsys.readouterr().out == ""


def test_config_dir_created(tmp_path):
    config_dir = tmp_path / "nested" / "config"
    ConfigLoader(config_dir=config_dir)
    assert config_dir.is_dir()


@pytest.mark.asyncio
async def test_invalid_runtime_rejected_by_manager(tmp_path):
    """
    Functional test: a bad runtime value fails when the driver is built.
    """
    with open(tmp_path / "simulation.yml", "w") as f:
        yaml.dump({"simulation": {"runtime": {"poll_interval": 0, "log_dir": None}}}, f)

    manager = SimulatorManager(config_dir=str(tmp_path))

    with pytest.raises(RuntimeError, match="poll_interval"):
        await manager.initialise()
