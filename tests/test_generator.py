import io
import textwrap
from typing import Generic

import pytest

from gots import (
    DefinitionGenerator,
    UnsupportedResultError,
    UnsupportedRootError,
    generate_type_definition,
    render_type_definition,
)
from tests import sample_types
from tests.sample_types import (
    Account,
    Compound,
    Contact,
    Derived,
    DummyBasicTypes,
    DummyFunc,
    DummyInterface,
    DummyMaps,
    DummyTest,
    DummyWithNestedStruct,
    DummyWithOtherPkgType,
    ExternalChild,
    KeyValueStore,
    Node,
    Person,
    Splitter,
    StringAlias,
    T,
    TestGeneric,
    TestStruct,
    Untyped,
    UsesTypeChecking,
    Wrapped,
)

PACKAGE = sample_types.__name__


def render(*roots, namespace=""):
    return render_type_definition(*roots, namespace=namespace, package=PACKAGE)


def assert_output(actual: str, expected: str) -> None:
    assert actual.strip() == textwrap.dedent(expected).strip()


# ---- reference suite ----

def test_basic_types():
    assert_output(render(DummyBasicTypes), """
        type DummyBasicTypes = {
          p_bool: boolean
          p_string: string
          p_int: number
          p_int8: number
          p_int16: number
          p_int32: number
          p_int64: number
          p_uint8: number
          p_uint16: number
          p_uint32: number
          p_uint64: number
          p_uintptr: object
          p_float32: number
          p_float64: number
          p_complex: object
          p_bytes: number[]
        }
    """)


def test_base():
    assert_output(render(Contact, TestStruct), """
        type Contact = {
          contact: string
          email: string
        }

        type TestStruct = {
          some_string: string
          some_string_ptr: null | string
          some_string_arr: string[]
          some_string_ptr_arr: (null | string)[]
          arr_ptr: null | string[]
          alias_to_string: StringAlias
          generic_data_string: TestGeneric<string>
          generic_data_int: TestGeneric<number>
          generic_data_string_alias: TestGeneric<StringAlias>
          generic_data_contact: TestGeneric<Contact>
          array_with_generic: TestGeneric<Contact>[]
        }

        type StringAlias = object & {
          some_alias_false_method(): boolean
          some_alias_true_method(): boolean
        }

        type TestGeneric<T> = {
          data: T[]
          p1: string
          p2: boolean
          p3: T
        }
    """)


def test_maps():
    assert_output(render(DummyMaps), """
        type DummyMaps = {
          map1: Record<string, number>
          map2: Record<string, DummySimple>
          map3: Record<DummySimple, number>
          map4: Record<string, DummySimpleGeneric<DummySimple>>
          map5: Record<string, any>
          map6: Record<any, number>
        }

        type DummySimple = {
          dummy_simple_field: string
        }

        type DummySimpleGeneric<T> = {
          generic_field: T
        }
    """)


def test_interface():
    assert_output(render(DummyInterface), """
        type DummyInterface = {
          func1(): string
          func2(p1: number): string
          func3(p1: null | DummyInterface): string
          func4(p1: any): string
        }
    """)


def test_nested_struct():
    assert_output(render(DummyWithNestedStruct), """
        type DummyWithNestedStruct = {
          string_prop: string
          proxy: {
            address: string
            port: number
          }
          proxy_ptr: null | {
            address: string
            port: number
          }
        }
    """)


def test_other_package_types_are_unknown():
    assert_output(render(DummyWithOtherPkgType), """
        type DummyWithOtherPkgType = {
          timestamp: unknown
          amount: unknown
          foo: any
        }
    """)


def test_struct_functions():
    assert_output(render(DummyFunc), """
        type DummyFunc = {
          returns_bool(): boolean
          returns_bool_params(p1: number): boolean
        }
    """)


def test_complex_embedding():
    assert_output(render(DummyTest), """
        type DummyTest = {
          some_string_arr: string[]
          some_string_ptr_arr: (null | string)[]
          ptr_arr: null | string[]
          ptr_arr_ptr: null | (null | string)[]
          ballance: number
          deposit: number
          other: null | DummyTest
          other_simple: DummySimple
          generic_simple: DummySimpleGeneric<number>
        } & DummySimple

        type DummySimple = {
          dummy_simple_field: string
        }

        type DummySimpleGeneric<T> = {
          generic_field: T
        }
    """)


# ---- scenarios ----

def test_struct_scenario_skips_private_fields():
    assert_output(render(Person), """
        type Person = {
          name: string
          age: null | number
          tags: string[]
          meta: Record<string, number>
        }
    """)


def test_interface_scenario():
    assert_output(render(KeyValueStore), """
        type KeyValueStore = {
          get(p1: string): string
          set(p1: string, p2: string): void
        }
    """)


def test_embedding_scenario():
    assert_output(render(Derived), """
        type Derived = {
          name: string
        } & Base

        type Base = {
          id: number
        }
    """)


def test_generic_embed():
    assert_output(render(Wrapped), """
        type Wrapped = {
          label: string
        } & DummySimpleGeneric<Contact>

        type DummySimpleGeneric<T> = {
          generic_field: T
        }

        type Contact = {
          contact: string
          email: string
        }
    """)


def test_filtered_embed_renders_unknown():
    out = render(ExternalChild)

    assert_output(out, """
        type ExternalChild = {
          name: string
        } & unknown
    """)
    assert "ExternalBase" not in out


def test_self_reference_terminates():
    assert_output(render(Node), """
        type Node = {
          value: number
          next: null | Node
          children: Node[]
        }
    """)


def test_multiple_results_marker():
    assert_output(render(Splitter), """
        type Splitter = {
          count(): number
          reset(): void
          // multiple results split
        }
    """)


def test_unannotated_members_are_any():
    assert_output(render(Untyped), """
        type Untyped = {
          describe(p1: any): any
        }
    """)


def test_named_primitive_and_callable():
    assert_output(render(Account), """
        type Account = {
          owner: UserId
          backup_owner: null | UserId
          on_change: Function
        }

        type UserId = object & {
        }
    """)


# ---- laws ----

def test_idempotent():
    assert render(TestStruct, DummyTest) == render(TestStruct, DummyTest)


def test_generic_template_written_once():
    out = render(TestStruct)

    assert out.count("type TestGeneric<T> = {") == 1
    assert out.count("TestGeneric<Contact>") == 2
    assert out.count("TestGeneric<string>") == 1
    assert out.count("TestGeneric<number>") == 1


def test_roots_are_deduplicated():
    out = render(Contact, Contact, Contact(contact="a", email="b"))

    assert out.count("type Contact = {") == 1


def test_roots_bypass_origin_filter():
    out = render_type_definition(Contact, package="somewhere.else")

    assert "type Contact = {" in out


def test_empty_prefix_admits_every_module():
    out = render_type_definition(ExternalChild, package="")

    assert "} & ExternalBase" in out
    assert "type ExternalBase = {" in out


def test_generic_instance_root():
    out = render(TestGeneric[int]())

    assert out.startswith("type TestGeneric<T> = {\n")
    assert "  p3: T\n" in out


def test_namespace_wraps_output():
    out = render(Contact, namespace="Api")

    assert out == (
        "declare namespace Api {\n"
        "  type Contact = {\n"
        "    contact: string\n"
        "    email: string\n"
        "  }\n"
        "\n"
        "}\n"
    )


def test_unsupported_root():
    with pytest.raises(UnsupportedRootError) as excinfo:
        render(StringAlias)

    assert excinfo.value.signature == f"{PACKAGE}.StringAlias"
    assert "Unsupported root type" in str(excinfo.value)


def test_writes_to_sink():
    buffer = io.StringIO()

    generate_type_definition(buffer, Person, package=PACKAGE)

    assert buffer.getvalue() == render(Person)


def test_generator_instances_are_independent():
    first = io.StringIO()
    second = io.StringIO()

    DefinitionGenerator(first, package=PACKAGE).generate(Contact)
    DefinitionGenerator(second, package=PACKAGE).generate(Contact)

    assert first.getvalue() == second.getvalue() != ""


def test_sink_errors_propagate():
    class BrokenSink:
        def write(self, s):
            raise OSError("disk full")

    with pytest.raises(OSError, match="disk full"):
        generate_type_definition(BrokenSink(), Person, package=PACKAGE)


# ---- generic arguments, local classes, unresolved names ----

def test_compound_generic_arguments_use_output_names():
    assert_output(render(Compound), """
        type Compound = {
          maybe: DummySimpleGeneric<null | Contact>
          many: DummySimpleGeneric<Contact[]>
        }

        type DummySimpleGeneric<T> = {
          generic_field: T
        }

        type Contact = {
          contact: string
          email: string
        }
    """)


def test_locally_defined_generic_written_once():
    class Box(Generic[T]):
        item: T

    class Holder:
        a: Box[int]
        b: Box[str]

    out = render_type_definition(Holder, package="tests")

    assert_output(out, """
        type Holder = {
          a: Box<number>
          b: Box<string>
        }

        type Box<T> = {
          item: T
        }
    """)
    assert out.count("type Box") == 1


def test_names_only_imported_for_type_checking_are_any():
    assert_output(render(UsesTypeChecking), """
        type UsesTypeChecking = {
          ratio: any
          label: string
          scale(p1: any): string
          total(): any
        }
    """)


def test_result_fragment_mismatch_is_fatal():
    class SplittingGenerator(DefinitionGenerator):
        def result_fragments(self, result_type):
            return ["string", "number"]

    with pytest.raises(UnsupportedResultError) as excinfo:
        SplittingGenerator(io.StringIO(), package=PACKAGE).generate(DummyFunc)

    assert excinfo.value.method_name == "returns_bool"
    assert excinfo.value.fragments == ["string", "number"]
