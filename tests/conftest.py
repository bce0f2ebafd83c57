"""Test configuration for dslgen."""

import json
import struct
import tempfile
from pathlib import Path

import pytest

from dslgen.core.config import Config
from dslgen.models import ModuleModel
from dslgen.services.resolver import ViewGraph


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage(temp_dir):
    """Create a storage backend rooted in the temporary directory."""
    from dslgen.storage import LocalStorageBackend
    return LocalStorageBackend(temp_dir)


@pytest.fixture
def config():
    """Default configuration, independent of the environment."""
    return Config()


def click_listener(name="com.example.widget.Root.OnClickListener"):
    """A SAM listener type taking the clicked view."""
    return {
        "name": name,
        "isInterface": True,
        "isSamLike": True,
        "functions": [
            {"name": "onClick", "parameters": [{"name": "v", "type": "android.view.View"}]},
        ],
    }


@pytest.fixture
def sample_module_data():
    """Root with a click listener and Child extending it with a color.

    Returns:
        dict: Descriptor JSON as produced by the model dump.
    """
    return {
        "modulePackage": "dev.inkremental.dsl.sample",
        "name": "Sample",
        "views": [
            {
                "name": "com.example.widget.Root",
                "attrs": [
                    {"name": "click", "isListener": True, "type": click_listener()},
                ],
            },
            {
                "name": "com.example.widget.Child",
                "superType": "com.example.widget.Root",
                "attrs": [
                    {"name": "color", "type": {"name": "kotlin.Int"}},
                ],
            },
        ],
    }


def make_module(data):
    """Validate descriptor data and wire the backlinks."""
    return ModuleModel.model_validate(data).backlink()


def make_graph(module, *dependencies):
    """Build and finalize a graph for a module and its dependencies."""
    graph = ViewGraph()
    for dependency in dependencies:
        graph.process_module(dependency, dependency=True)
    graph.process_module(module)
    graph.finalize()
    return graph


@pytest.fixture
def sample_module(sample_module_data):
    module = make_module(sample_module_data)
    make_graph(module)
    return module


@pytest.fixture
def write_descriptor(temp_dir):
    """Write descriptor data to a JSON file under the temporary directory."""
    def write(data, name="module.json"):
        path = temp_dir / "descriptors" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return write


def assemble_class(class_name, methods, super_name="java/lang/Object"):
    """Assemble minimal class file bytes.

    Args:
        class_name: Internal name, e.g. ``android/widget/TextView``
        methods: Dicts with ``name``, ``descriptor``, ``locals`` (list of
            (name, descriptor) pairs, slot index = position) and optionally
            ``parameter_annotations`` (one list of annotation descriptors per
            parameter; omitted means no annotation attribute)

    Returns:
        bytes: The class file.
    """
    pool = []
    indexes = {}

    def utf8(text):
        key = ("utf8", text)
        if key not in indexes:
            raw = text.encode("utf-8")
            pool.append(b"\x01" + struct.pack(">H", len(raw)) + raw)
            indexes[key] = len(pool)
        return indexes[key]

    def class_ref(name):
        key = ("class", name)
        if key not in indexes:
            name_index = utf8(name)
            pool.append(b"\x07" + struct.pack(">H", name_index))
            indexes[key] = len(pool)
        return indexes[key]

    def attribute(name, body):
        return struct.pack(">HI", utf8(name), len(body)) + body

    this_index = class_ref(class_name)
    super_index = class_ref(super_name)

    encoded_methods = []
    for method in methods:
        local_vars = method.get("locals", [])
        table = struct.pack(">H", len(local_vars)) + b"".join(
            struct.pack(">HHHHH", 0, 1, utf8(name), utf8(descriptor), slot)
            for slot, (name, descriptor) in enumerate(local_vars)
        )
        code = (
            struct.pack(">HH", 2, len(local_vars))
            + struct.pack(">I", 1) + b"\xb1"  # return
            + struct.pack(">H", 0)  # exception table
            + struct.pack(">H", 1)
            + attribute("LocalVariableTable", table)
        )
        attributes = [attribute("Code", code)]

        groups = method.get("parameter_annotations")
        if groups is not None:
            body = bytes([len(groups)]) + b"".join(
                struct.pack(">H", len(group))
                + b"".join(struct.pack(">HH", utf8(descriptor), 0) for descriptor in group)
                for group in groups
            )
            attributes.append(attribute("RuntimeInvisibleParameterAnnotations", body))

        encoded_methods.append(
            struct.pack(">HHHH", 0x0001, utf8(method["name"]), utf8(method["descriptor"]), len(attributes))
            + b"".join(attributes)
        )

    return (
        struct.pack(">IHH", 0xCAFEBABE, 0, 52)
        + struct.pack(">H", len(pool) + 1)
        + b"".join(pool)
        + struct.pack(">HHH", 0x0021, this_index, super_index)
        + struct.pack(">H", 0)  # interfaces
        + struct.pack(">H", 0)  # fields
        + struct.pack(">H", len(encoded_methods))
        + b"".join(encoded_methods)
        + struct.pack(">H", 0)  # class attributes
    )


def text_view_methods(text_annotation="Landroidx/annotation/NonNull;"):
    """Methods of a fake ``android.widget.TextView``."""
    this = ("this", "Landroid/widget/TextView;")
    return [
        {
            "name": "<init>",
            "descriptor": "(Landroid/content/Context;)V",
            "locals": [this, ("context", "Landroid/content/Context;")],
            "parameter_annotations": [["Landroidx/annotation/NonNull;"]],
        },
        {
            "name": "setText",
            "descriptor": "(Ljava/lang/CharSequence;)V",
            "locals": [this, ("text", "Ljava/lang/CharSequence;")],
            "parameter_annotations": [[text_annotation]],
        },
        {
            "name": "setHint",
            "descriptor": "(Ljava/lang/CharSequence;)V",
            "locals": [this, ("hint", "Ljava/lang/CharSequence;")],
            "parameter_annotations": [["Landroidx/annotation/Nullable;"]],
        },
        {
            "name": "setTag",
            "descriptor": "(Ljava/lang/Object;)V",
            "locals": [this, ("tag", "Ljava/lang/Object;")],
        },
        {
            "name": "setPadding",
            "descriptor": "(II)V",
            "locals": [this, ("left", "I"), ("top", "I")],
            "parameter_annotations": [[], []],
        },
        {
            "name": "setLines",
            "descriptor": "([I)V",
            "locals": [this, ("lines", "[I")],
            "parameter_annotations": [["Landroidx/annotation/Nullable;"]],
        },
    ]


@pytest.fixture
def class_dir(temp_dir):
    """Class path directory holding a fake ``android.widget.TextView``."""
    root = temp_dir / "classes"
    path = root / "android" / "widget" / "TextView.class"
    path.parent.mkdir(parents=True)
    path.write_bytes(assemble_class("android/widget/TextView", text_view_methods()))
    return root


@pytest.fixture(name="make_module")
def make_module_fixture():
    return make_module


@pytest.fixture(name="make_graph")
def make_graph_fixture():
    return make_graph


@pytest.fixture(name="assemble_class")
def assemble_class_fixture():
    return assemble_class


@pytest.fixture(name="text_view_methods")
def text_view_methods_fixture():
    return text_view_methods


@pytest.fixture(name="click_listener")
def click_listener_fixture():
    return click_listener
