import pytest

from smartfactory import Module, Registry, RegistryProvider

from shapes import Circle, Color, Red, Shape, Square


class ProviderModule(Module):
    def init(self, registry):
        self.bind_singleton(Shape, Circle)
        self.bind_dynamic(Shape, Square, name="sq")


@pytest.fixture
def registry():
    return Registry(ProviderModule())


def test_get_provider_returns_identical_wrapper(registry):
    first = registry.get_provider(Shape)
    assert registry.get_provider(Shape) is first
    assert registry.get_provider(Shape, "sq") is not first
    assert isinstance(first, RegistryProvider)


def test_provider_respects_singleton_binding(registry):
    provider = registry.get_provider(Shape)
    results = [provider.get() for _ in range(3)]

    assert all(r is registry.get_instance(Shape) for r in results)


def test_named_provider_respects_dynamic_binding(registry):
    provider = registry.get_provider(Shape, "sq")
    a, b = provider.get(), provider.get()

    assert isinstance(a, Square)
    assert isinstance(b, Square)
    assert a is not b


def test_provider_resolves_at_call_time(registry):
    provider = registry.get_provider(Color, "late")

    class LateModule(Module):
        def init(self, registry):
            self.bind_singleton(Color, Red, name="late")

    registry.merge(LateModule())
    assert isinstance(provider.get(), Red)


def test_provider_is_callable(registry):
    provider = registry.get_provider(Shape)
    assert provider() is provider.get()


def test_clear_cache_drops_providers(registry):
    before = registry.get_provider(Shape)
    registry.clear_cache()
    assert registry.get_provider(Shape) is not before


def test_provider_can_be_injected_through_factory():
    class Canvas:
        def __init__(self, shapes):
            self.shapes = shapes

    class CanvasModule(Module):
        def init(self, registry):
            self.bind_dynamic(Shape, Square)
            self.bind_singleton(Canvas, factory=lambda: Canvas(registry.get_provider(Shape)))

    registry = Registry(CanvasModule())
    canvas = registry.get_instance(Canvas)
    assert canvas.shapes is registry.get_provider(Shape)
    assert canvas.shapes.get() is not canvas.shapes.get()
