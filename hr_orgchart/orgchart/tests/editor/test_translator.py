import pytest

from hr_orgchart.orgchart.editor.session import ChartSession
from hr_orgchart.orgchart.editor.transport import ChartProfileClient
from hr_orgchart.orgchart.editor.translator import InteractionTranslator
from hr_orgchart.orgchart.editor.translator import RosterDirectory
from hr_orgchart.orgchart.editor.translator import new_node_id
from hr_orgchart.orgchart.editor.widget import MENU_ADD_DEPARTMENT
from hr_orgchart.orgchart.editor.widget import MENU_ADD_EMPLOYEE
from hr_orgchart.orgchart.editor.widget import MENU_ADD_HEADCOUNT_OPEN
from hr_orgchart.orgchart.editor.widget import MENU_REMOVE
from hr_orgchart.orgchart.editor.widget import RecordingWidget

from .fakes import FakeTransport


@pytest.fixture
def session():
    session = ChartSession(
        ChartProfileClient(FakeTransport()), widget=RecordingWidget()
    )
    session.store.load(
        [
            {"id": "m", "name": "Manager"},
            {"id": "g", "pid": "m", "name": "Eng", "tags": ["group"]},
            {"id": "1", "stpid": "g", "name": "E1", "title": "Dev"},
            {"id": "2", "stpid": "g", "name": "E2"},
        ]
    )
    return session


@pytest.fixture
def forms():
    return []


@pytest.fixture
def translator(session, forms):
    directory = RosterDirectory(
        [
            {
                "id": "77",
                "name": "Hoa Le",
                "title": "QA",
                "image": "/77.jpg",
                "dept": "QA",
            }
        ]
    )
    return InteractionTranslator(
        session,
        directory=directory,
        on_node_click=forms.append,
        clock=lambda: 1700000000.5,
    )


def test_new_node_id_suffixes_collisions():
    taken = {"emp_5000", "emp_5000_2"}
    assert new_node_id("emp", taken.__contains__, lambda: 5.0) == "emp_5000_3"


def test_menu_add_department(translator, session):
    node = translator.handle_menu(MENU_ADD_DEPARTMENT, "m")
    assert node.id == "dept_1700000000500"
    assert (node.pid, node.stpid, node.type) == ("m", None, "group")
    assert node.tags == ["group"]
    assert node.name == "New Department"
    assert session.widget.draw_count == 1
    assert session.has_changes is True


def test_menu_add_employee_on_group_uses_membership(translator):
    node = translator.handle_menu(MENU_ADD_EMPLOYEE, "g")
    assert (node.pid, node.stpid) == (None, "g")
    assert (node.name, node.title, node.image) == ("New Employee", "Position", "")


def test_menu_add_open_headcount_under_person(translator):
    node = translator.handle_menu(MENU_ADD_HEADCOUNT_OPEN, "1")
    assert (node.pid, node.stpid) == ("1", None)
    assert node.tags == ["headcount_open"]
    assert node.image == "/headcount_open.png"
    assert node.description == "Open headcount position"


def test_unknown_menu_action(translator):
    with pytest.raises(ValueError, match="Unknown menu action"):
        translator.handle_menu("explode", "m")


def test_menu_remove(translator, session):
    assert translator.handle_menu(MENU_REMOVE, "2") is True
    assert "2" not in session.store
    assert session.widget.filter_refreshes == 1
    assert translator.remove("2") is False


def test_click_opens_form(translator, forms):
    form = translator.handle_click("1")
    assert forms == [form]
    assert (form.original_id, form.name, form.title, form.stpid) == (
        "1",
        "E1",
        "Dev",
        "g",
    )
    assert translator.handle_click("1", "menu") is None
    assert translator.handle_click("ghost") is None


def test_click_move_hotspots(translator, session):
    assert translator.handle_click("2", "left") is None
    assert session.store.ids() == ["m", "g", "2", "1"]
    assert session.widget.draw_count == 1


def test_drop_rejection_alerts(translator, session):
    assert translator.handle_drop("m", "1") is False
    assert session.widget.alerts
    assert session.store.get("m").pid is None

    assert translator.handle_drop("2", "m") is True
    assert session.store.get("2").pid == "m"


def test_retype_id_fills_from_directory(translator):
    form = translator.handle_click("2")
    translator.retype_id(form, "77")
    assert (form.id, form.name, form.title, form.image, form.dept) == (
        "77",
        "Hoa Le",
        "QA",
        "/77.jpg",
        "QA",
    )
    assert form.stpid == "g"


def test_submit_edit_renames_and_updates(translator, session):
    session.store.load(session.store.get_all() + [{"id": "3", "pid": "2"}])
    form = translator.handle_click("2")
    form.id = "20"
    form.title = "Lead"
    form.tags = "emp, Emp_probation"
    assert translator.submit_edit(form) is True

    node = session.store.get("20")
    assert (node.title, node.stpid) == ("Lead", "g")
    assert node.tags == ["emp", "Emp_probation"]
    assert session.store.get("3").pid == "20"
    assert "2" not in session.store


def test_submit_edit_rejects_duplicate_without_changes(translator, session):
    form = translator.handle_click("2")
    form.id = "1"
    form.name = "Changed"
    assert translator.submit_edit(form) is False
    assert session.widget.alerts == [
        'Employee ID "1" already exists! Please choose a unique ID.'
    ]
    assert session.store.get("2").name == "E2"


def test_directory_loads_from_canonical_nodes_on_first_retype(session):
    transport = session.client.transport
    transport.queue(
        200,
        {"data": [{"id": "88", "name": "Minh Vo", "dept": "Ops"}], "success": True},
    )
    translator = InteractionTranslator(session)
    form = translator.handle_click("1")

    translator.retype_id(form, "88")
    translator.retype_id(form, "88")

    assert (form.name, form.dept, form.stpid) == ("Minh Vo", "Ops", "g")
    assert transport.requests == [("GET", "/api/v1/orgchart/nodes/", None)]


def test_directory_failure_alerts_and_keeps_form(session):
    session.client.transport.queue(500, {"success": False, "error": "db down"})
    translator = InteractionTranslator(session)
    form = translator.handle_click("1")

    translator.retype_id(form, "88")

    assert (form.id, form.name) == ("88", "E1")
    assert session.widget.alerts == ["Employee lookup unavailable: db down"]


def test_submit_edit_requires_id(translator, session):
    form = translator.handle_click("2")
    form.id = "  "
    assert translator.submit_edit(form) is False
    assert session.widget.alerts == ["ID is required!"]


def test_widget_events_mark_dirty(translator, session):
    translator.handle_widget_event("redraw")
    assert session.has_changes is False
    translator.handle_widget_event("update")
    assert session.has_changes is True


def test_widget_config_binds_fields_and_tag_templates(session):
    config = session.widget.config
    assert config["template"] == "big"
    assert config["nodeBinding"] == {
        "field_0": "name",
        "field_1": "title",
        "img_0": "image",
    }
    assert config["tags"]["Emp_probation"] == {"template": "big_v2"}
    assert config["tags"]["headcount_open"] == {"template": "big_hc_open"}
    assert list(config["nodeMenu"]) == [
        MENU_ADD_DEPARTMENT,
        MENU_ADD_EMPLOYEE,
        MENU_ADD_HEADCOUNT_OPEN,
        MENU_REMOVE,
    ]
