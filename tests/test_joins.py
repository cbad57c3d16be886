from bson import ObjectId
from fakes import InMemoryReader

from crm_export.services.joins import (
    PLACEHOLDER,
    Cardinality,
    JoinExecutor,
    JoinSpec,
    display_text,
    explode,
    get_path,
    resolve_reference,
)


def test_resolve_reference_defaults_missing_documents_and_fields():
    assert resolve_reference({"descrizione": "Abito"}, "descrizione") == "Abito"
    assert resolve_reference(None, "descrizione") == PLACEHOLDER
    assert resolve_reference({"descrizione": None}, "descrizione") == PLACEHOLDER
    assert resolve_reference({}, "nomeAtelier", None) is None
    # empty strings are values, not missing references
    assert resolve_reference({"descrizione": ""}, "descrizione") == ""


def test_get_path_follows_nested_documents():
    context = {"product": {"marcaProdotto": "m1"}}
    assert get_path(context, "product.marcaProdotto") == "m1"
    assert get_path(context, "product.missing.deeper") is None
    assert get_path({"product": None}, "product.marcaProdotto") is None


def test_explode_treats_single_values_as_one_item():
    assert explode(None) == []
    assert explode([]) == []
    assert explode([1, 2]) == [1, 2]
    assert explode({"codice": "A"}) == [{"codice": "A"}]


def test_executor_drops_rows_missing_required_joins(store):
    present = store.insert("things", {"label": "kept"})
    specs = (JoinSpec(name="thing", collection="things", local_key="ref", cardinality=Cardinality.ONE),)
    executor = JoinExecutor(InMemoryReader(store))

    rows = list(executor.run([{"ref": present}, {"ref": ObjectId()}, {}], specs))

    assert len(rows) == 1
    assert rows[0]["thing"]["label"] == "kept"


def test_executor_resolves_optional_fields_with_default(store):
    colour = store.insert("colours", {"descrizione": "Avorio"})
    specs = (JoinSpec(name="color", collection="colours", local_key="ref", field="descrizione", default=PLACEHOLDER),)
    executor = JoinExecutor(InMemoryReader(store))

    rows = list(executor.run([{"ref": colour}, {"ref": ObjectId()}, {"ref": None}], specs))

    assert [row["color"] for row in rows] == ["Avorio", PLACEHOLDER, PLACEHOLDER]


def test_executor_loads_each_collection_once(store):
    first = store.insert("things", {"label": "a"})
    second = store.insert("things", {"label": "b"})
    specs = (JoinSpec(name="thing", collection="things", local_key="ref"),)
    executor = JoinExecutor(InMemoryReader(store))

    list(executor.run([{"ref": first}, {"ref": second}, {"ref": first}], specs))

    assert [name for name, _ in store.queries] == ["things"]


def test_unhashable_references_do_not_match(store):
    store.insert("things", {"label": "a"})
    specs = (JoinSpec(name="thing", collection="things", local_key="ref", field="label", default="none"),)
    executor = JoinExecutor(InMemoryReader(store))

    rows = list(executor.run([{"ref": [1, 2]}], specs))

    assert rows[0]["thing"] == "none"

def test_display_text_keeps_strings_and_missing_values():
    assert display_text("Avorio") == "Avorio"
    assert display_text(None) is None
    assert display_text(42) == "42"
    assert display_text({"it": "Abito"}) == "{'it': 'Abito'}"
