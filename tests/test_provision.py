import os

from xuimanager import provision
from xuimanager.meta_store import Field
from xuimanager.registry import PanelRegistry


def scripted(*answers):
    it = iter(answers)
    return lambda prompt="": next(it)


def test_initial_install_reprompts_on_conflicts(settings, store, runtime, capsys):
    registry = PanelRegistry(settings.registry_file)
    answers = scripted(
        "2",
        # panel 1: defaults, 10 GB
        "", "", "", "10",
        # panel 2: duplicate web port, then default; overlapping range, then default; unlimited
        "2020", "", "10050", "10150", "", "", "",
    )

    created = provision.initial_install(settings, registry, store, runtime, "1.2.3.4", answers)

    assert [p.index for p in created] == [1, 2]
    reg = PanelRegistry(settings.registry_file).load()
    assert reg.get(2).web_port == 2021
    assert (reg.get(2).range_start, reg.get(2).range_end) == (10100, 10199)
    rec = store.load()
    assert rec.get_int(1, Field.QUOTA_GB) == 10
    assert rec.get_int(2, Field.QUOTA_GB) == 0
    assert runtime.compose_ups == [settings.compose_file]
    out = capsys.readouterr().out
    assert "already used by another panel" in out
    assert "overlaps with an existing panel range" in out
    assert "http://1.2.3.4:2021" in out


def test_rebuild_declined_keeps_existing(settings, registry, store, runtime):
    store.init_record(1, 7)
    assert provision.initial_install(settings, registry, store, runtime, "x", scripted("n")) == []
    assert len(PanelRegistry(settings.registry_file).load()) == 1
    assert store.load().get_int(1, Field.QUOTA_GB) == 7


def test_add_panel_uses_next_index(settings, registry, store, runtime):
    panel = provision.add_panel(settings, registry, store, runtime, "x", scripted("", "", "", "25"))

    assert panel.index == 2
    assert panel.web_port == 2021
    assert store.load().get_int(2, Field.QUOTA_GB) == 25
    assert len(runtime.compose_ups) == 1


def test_add_panel_requires_install(settings, store, runtime):
    registry = PanelRegistry(settings.registry_file)
    assert provision.add_panel(settings, registry, store, runtime, "x", scripted()) is None


def test_reset_panel_wipes_db_and_usage(settings, registry, store, runtime, panel):
    store.init_record(1, 5)
    store.set_used(1, 12345)
    db = os.path.join(settings.panel_dir(1), "db")
    os.makedirs(os.path.join(db, "sub"))
    with open(os.path.join(db, "x-ui.db"), "w") as f:
        f.write("data")

    assert provision.reset_panel(settings, registry, store, runtime, 1, scripted("y"))

    assert os.listdir(db) == []
    assert runtime.stop_calls == [panel.container]
    rec = store.load().record(1)
    assert rec.used_bytes == 0 and rec.quota_gb == 5


def test_reset_panel_unknown_index(settings, registry, store, runtime):
    assert not provision.reset_panel(settings, registry, store, runtime, 9, scripted())


def test_uninstall_all(settings, registry, runtime):
    with open(settings.compose_file, "w") as f:
        f.write("services: {}\n")

    assert provision.uninstall_all(settings, runtime, scripted("y"))

    assert not os.path.exists(settings.base_dir)
    assert runtime.compose_downs == [settings.compose_file]


def test_uninstall_aborted(settings, registry, runtime):
    assert not provision.uninstall_all(settings, runtime, scripted("n"))
    assert os.path.isdir(settings.base_dir)


def test_reset_panel_usage_reports_stopped(store, runtime, panel):
    store.init_record(1, 1)
    runtime.add(panel.container, running=False)
    assert provision.reset_panel_usage(panel, store, runtime) is True
    runtime.start(panel.container)
    assert provision.reset_panel_usage(panel, store, runtime) is False
