import pytest

from smartfactory import (
    InvalidArgumentError,
    InvalidBindingError,
    Lifetime,
    Module,
    ProviderBinding,
    Registry,
    TypeBinding,
    module,
)

from shapes import Circle, Color, Drawable, Red, Shape, Sketch, Square


class EmptyModule(Module):
    def init(self, registry):
        pass


@pytest.fixture
def m():
    return EmptyModule()


def test_bind_singleton_registers_type_binding(m):
    m.bind_singleton(Shape, Circle)

    binding = m.get_bind(Shape)
    assert isinstance(binding, TypeBinding)
    assert binding.target_type is Circle
    assert binding.singleton


def test_bind_dynamic_registers_named_provider_binding(m):
    m.bind_dynamic(Shape, name="sq", factory=Square)

    binding = m.get_bind(Shape, "sq")
    assert isinstance(binding, ProviderBinding)
    assert not binding.singleton
    assert m.get_bind(Shape) is None


def test_bind_with_explicit_lifetime(m):
    m.bind(Shape, Circle, lifetime=Lifetime.TRANSIENT)
    assert not m.get_bind(Shape).singleton


def test_last_registration_wins(m):
    m.bind_singleton(Shape, Circle)
    m.bind_dynamic(Shape, Square)

    binding = m.get_bind(Shape)
    assert binding.target_type is Square
    assert not binding.singleton
    assert len(m.get_bindings()) == 1


def test_get_bindings_is_a_snapshot(m):
    m.bind_singleton(Shape, Circle)
    snapshot = m.get_bindings()
    m.bind_singleton(Color, Red)

    assert len(snapshot) == 1
    assert {b.key.type for b in m.get_bindings()} == {Shape, Color}


def test_bind_instance_is_singleton_provider(m):
    circle = Circle()
    m.bind_instance(Shape, circle, name="unit")

    binding = m.get_bind(Shape, "unit")
    assert binding.singleton
    assert binding.provider.get() is circle


@pytest.mark.parametrize(
    ("args", "kwargs"),
    [
        ((None, Circle), {}),
        ((Shape,), {}),
        ((Shape, Circle), {"factory": Circle}),
        ((Shape, Circle()), {}),
        ((Shape,), {"factory": 42}),
        ((Shape, Circle), {"name": 3}),
    ],
)
def test_invalid_registrations_raise(m, args, kwargs):
    with pytest.raises(InvalidArgumentError):
        m.bind_singleton(*args, **kwargs)
    assert m.get_bindings() == ()


def test_invalid_argument_error_is_value_error(m):
    with pytest.raises(ValueError, match="type parameter"):
        m.bind_dynamic(None, factory=Circle)


def test_bind_instance_rejects_none(m):
    with pytest.raises(InvalidArgumentError):
        m.bind_instance(Shape, None)


def test_impl_must_subclass_bound_type(m):
    with pytest.raises(InvalidBindingError) as ctx:
        m.bind_singleton(Shape, Red)
    assert "must be a subclass of Shape" in str(ctx.value)


def test_impl_may_structurally_conform_to_protocol(m):
    m.bind_singleton(Drawable, Sketch)
    assert m.get_bind(Drawable).target_type is Sketch


def test_impl_missing_protocol_member_raises(m):
    with pytest.raises(TypeError) as ctx:
        m.bind_singleton(Drawable, Circle)
    assert "missing members: draw" in str(ctx.value)


def test_non_type_tokens_are_not_validated(m):
    m.bind_singleton("shape", Circle)
    assert m.get_bind("shape").target_type is Circle


def test_merge_runs_init_against_given_registry_and_copies_bindings(m):
    seen = []

    @module
    def extra(mod, registry):
        seen.append(registry)
        mod.bind_singleton(Color, Red)

    registry = Registry(m)
    m.merge(registry, extra)

    assert seen == [registry]
    assert m.get_bind(Color).target_type is Red


def test_merge_overwrites_existing_keys(m):
    m.bind_singleton(Shape, Circle)

    @module
    def extra(mod, registry):
        mod.bind_dynamic(Shape, Square)

    m.merge(Registry(m), extra)
    assert m.get_bind(Shape).target_type is Square


def test_merge_rejects_none(m):
    with pytest.raises(InvalidArgumentError):
        m.merge(Registry(m), None)


def test_module_decorator_builds_module():
    @module
    def shapes(mod, registry):
        mod.bind_singleton(Shape, Circle)

    assert isinstance(shapes, Module)
    Registry(shapes)
    assert shapes.get_bind(Shape).target_type is Circle
    assert "shapes" in repr(shapes)


def test_module_cannot_be_instantiated_without_init():
    with pytest.raises(TypeError):
        Module()  # type: ignore[abstract]
