"""Compile a discovery document into a tree of callable endpoint methods.

This is the core algorithm of apitree. A discovery document is a tree of
*resources* (which nest) and *methods* (HTTP verb + URL template +
parameter schema). Compiling it produces an :class:`EndpointType`;
instantiating that type yields an :class:`Endpoint` whose children mirror
the document::

    drive = endpoint_type.instantiate({"params": {"key": API_KEY}})
    files = await drive.files.list({"q": "name contains 'report'"})

**Algorithm summary**

1. :func:`apply_schema` walks ``methods`` and ``resources`` with an explicit
   stack, so arbitrarily deep documents never hit the recursion limit.
2. Each method becomes a :class:`MethodNode` built by :func:`make_method`,
   capturing the root document, its own schema, the endpoint instance as
   context, and the request executor.
3. Calling a method builds a
   :class:`~apitree.client.apirequest.RequestDescriptor` and returns
   whatever the executor returns (a coroutine for the default
   :func:`~apitree.client.apirequest.create_api_request`).

Nodes are navigated by lookup, either ``node["files"]`` or ``node.files``.
Names starting with an underscore are reserved for node state, so every
public attribute name belongs to the document.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, Optional

from apitree.client.apirequest import RequestDescriptor, create_api_request
from apitree.exceptions import ArgumentError, FrozenEndpointError
from apitree.urls import build_url, trim_delimiters

Executor = Callable[[RequestDescriptor], Any]


# ---------------------------------------------------------------------------
# Path parameters
# ---------------------------------------------------------------------------


def extract_path_params(parameters: Any) -> list[str]:
    """Return the names of parameters located in the URL path.

    Args:
        parameters: A method's ``parameters`` mapping. Anything that is not
            a mapping is treated as empty.

    Returns:
        Parameter names whose ``location`` is ``"path"``, in declaration
        order.
    """
    if not isinstance(parameters, Mapping):
        return []
    return [
        name
        for name, spec in parameters.items()
        if isinstance(spec, Mapping) and spec.get("location") == "path"
    ]


# ---------------------------------------------------------------------------
# Node tree
# ---------------------------------------------------------------------------


class ResourceNode:
    """A named container of methods and nested resources."""

    _kind = "resource"

    def __init__(self, name: str = "") -> None:
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_children", {})
        object.__setattr__(self, "_frozen", False)

    def __getattr__(self, name: str) -> Any:
        # Only reached when regular attribute lookup fails.
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._children[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} {self._name!r} has no member {name!r}"
            ) from None

    def __getitem__(self, name: str) -> ResourceNode:
        return self._children[name]

    def __contains__(self, name: object) -> bool:
        return name in self._children

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __bool__(self) -> bool:
        return True

    def __setattr__(self, name: str, value: Any) -> None:
        if self._frozen:
            raise FrozenEndpointError(f"Cannot set {name!r}: endpoint is frozen")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if self._frozen:
            raise FrozenEndpointError(f"Cannot delete {name!r}: endpoint is frozen")
        object.__delattr__(self, name)

    def __repr__(self) -> str:
        members = ", ".join(self._children)
        return f"<{type(self).__name__} {self._name or '/'}: {members}>"

    def _set_child(self, name: str, node: ResourceNode) -> None:
        if self._frozen:
            raise FrozenEndpointError(f"Cannot add {name!r}: endpoint is frozen")
        self._children[name] = node

    def _ensure_child(self, name: str) -> ResourceNode:
        """Return the child called *name*, creating an empty resource if absent."""
        child = self._children.get(name)
        if child is None:
            child = ResourceNode(name)
            self._set_child(name, child)
        return child


class MethodNode(ResourceNode):
    """A callable endpoint method.

    A method node can also hold children when a document declares a
    resource with the same name as a method at the same level.
    """

    _kind = "method"

    def __init__(
        self,
        name: str,
        root_schema: Mapping[str, Any],
        method_schema: Mapping[str, Any],
        context: Any,
        executor: Executor,
    ) -> None:
        super().__init__(name)
        object.__setattr__(self, "_root_schema", root_schema)
        object.__setattr__(self, "_schema", method_schema)
        object.__setattr__(self, "_context", context)
        object.__setattr__(self, "_executor", executor)

    def __call__(self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Any:
        """Build the request descriptor and hand it to the executor.

        Keyword arguments are merged over *params*.
        """
        root = self._root_schema
        method = self._schema

        merged: dict[str, Any] = dict(params or {})
        merged.update(kwargs)

        url = trim_delimiters(build_url(
            _text(root.get("rootUrl")) + _text(root.get("servicePath")) + _text(method.get("path"))
        ))

        media_url: Optional[str] = None
        simple_path = _simple_upload_path(method)
        if simple_path:
            media_url = trim_delimiters(build_url(_text(root.get("rootUrl")) + simple_path))

        descriptor = RequestDescriptor(
            url=url,
            http_method=method.get("httpMethod"),
            params=merged,
            required_params=list(method.get("parameterOrder") or []),
            path_params=extract_path_params(method.get("parameters")),
            context=self._context,
            media_url=media_url,
        )
        return self._executor(descriptor)


class Endpoint(ResourceNode):
    """An instantiated API client.

    Attributes reserved for the request layer:

    * ``_options`` -- construction options (default query ``params``,
      ``headers``, ``timeout``), read at call time.
    * ``_discovery`` -- lookup-only reference to the
      :class:`~apitree.discovery.Discovery` that built this endpoint, used
      to reach its shared transport. It is not an ownership relation and
      takes no part in equality or serialisation.
    * ``_type`` -- the :class:`EndpointType` this instance came from.
    """

    def __init__(
        self,
        endpoint_type: EndpointType,
        options: Optional[Mapping[str, Any]] = None,
        discovery: Any = None,
    ) -> None:
        super().__init__(endpoint_type.name or "")
        object.__setattr__(self, "_type", endpoint_type)
        object.__setattr__(self, "_options", dict(options or {}))
        object.__setattr__(self, "_discovery", discovery)


# ---------------------------------------------------------------------------
# Synthesis
# ---------------------------------------------------------------------------


def make_method(
    root_schema: Mapping[str, Any],
    method_schema: Mapping[str, Any],
    context: Any,
    executor: Optional[Executor] = None,
    name: str = "",
) -> MethodNode:
    """Synthesize a callable endpoint method.

    Nothing is validated here: a malformed schema only shows up when the
    method is called.

    Args:
        root_schema: The top-level discovery document (``rootUrl``,
            ``servicePath``).
        method_schema: The method's own schema.
        context: Object passed through to every request descriptor.
        executor: Request executor; defaults to
            :func:`~apitree.client.apirequest.create_api_request`.
        name: Method name, used in ``repr``.
    """
    if not isinstance(method_schema, Mapping):
        method_schema = {}
    return MethodNode(name, root_schema, method_schema, context, executor or create_api_request)


def apply_schema(
    target: ResourceNode,
    root_schema: Mapping[str, Any],
    schema: Mapping[str, Any],
    context: Any,
    executor: Optional[Executor] = None,
) -> None:
    """Attach the methods and resources of *schema* to *target*.

    Declaration order is preserved; at each level methods are attached
    before resources are entered. *root_schema* is passed unchanged to
    every method so that nested resources resolve against the top-level
    ``rootUrl`` and ``servicePath``.
    """
    stack: list[tuple[ResourceNode, Any]] = [(target, schema)]
    while stack:
        node, current = stack.pop()
        if not isinstance(current, Mapping):
            continue

        methods = current.get("methods")
        if isinstance(methods, Mapping):
            for method_name, method in methods.items():
                node._set_child(
                    method_name,
                    make_method(root_schema, method, context, executor, method_name),
                )

        resources = current.get("resources")
        if isinstance(resources, Mapping):
            pending = [
                (node._ensure_child(resource_name), resource)
                for resource_name, resource in resources.items()
            ]
            stack.extend(reversed(pending))


# ---------------------------------------------------------------------------
# Endpoint types
# ---------------------------------------------------------------------------


class EndpointType:
    """A compiled discovery document that can be instantiated repeatedly.

    Calling the type is the same as calling :meth:`instantiate`.
    """

    def __init__(self, document: Mapping[str, Any], executor: Optional[Executor] = None) -> None:
        self._document = document
        self._executor = executor or create_api_request

    @property
    def document(self) -> Mapping[str, Any]:
        """The captured discovery document."""
        return self._document

    @property
    def name(self) -> Optional[str]:
        return self._document.get("name")

    @property
    def version(self) -> Optional[str]:
        return self._document.get("version")

    @property
    def title(self) -> Optional[str]:
        return self._document.get("title")

    def instantiate(
        self,
        options: Optional[Mapping[str, Any]] = None,
        discovery: Any = None,
    ) -> Endpoint:
        """Build a fresh :class:`Endpoint` populated from the document.

        The new endpoint is both the target of :func:`apply_schema` and the
        context of every method on it.

        Args:
            options: Construction options, copied onto the instance.
            discovery: Lookup-only back-reference to the owning client.
        """
        endpoint = Endpoint(self, options, discovery)
        apply_schema(endpoint, self._document, self._document, endpoint, self._executor)
        return endpoint

    __call__ = instantiate

    def __repr__(self) -> str:
        return f"<EndpointType {self.name or '?'}:{self.version or '?'}>"


def make_endpoint_type(
    document: Mapping[str, Any],
    executor: Optional[Executor] = None,
) -> EndpointType:
    """Compile *document* into an :class:`EndpointType`."""
    return EndpointType(document, executor)


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------


def freeze(node: ResourceNode) -> ResourceNode:
    """Make *node* and everything below it immutable.

    Child mappings are replaced by read-only proxies; any later
    assignment, deletion, or child insertion raises
    :class:`~apitree.exceptions.FrozenEndpointError`.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        if current._frozen:
            continue
        children = current._children
        object.__setattr__(current, "_children", MappingProxyType(dict(children)))
        object.__setattr__(current, "_frozen", True)
        stack.extend(children.values())
    return node


def iter_methods(node: ResourceNode) -> Iterator[tuple[str, MethodNode]]:
    """Yield ``(dotted_path, method)`` for every method below *node*, in document order."""
    stack: list[tuple[str, ResourceNode]] = [
        (name, child) for name, child in reversed(list(node._children.items()))
    ]
    while stack:
        path, current = stack.pop()
        if isinstance(current, MethodNode):
            yield path, current
        stack.extend(
            (f"{path}.{name}", child)
            for name, child in reversed(list(current._children.items()))
        )


def describe_tree(node: ResourceNode) -> dict[str, Any]:
    """Return the shape of *node* as nested dicts.

    Methods are keyed ``name()`` and map to ``None`` unless they also carry
    children; resources map to their own nested dict.
    """
    result: dict[str, Any] = {}
    stack: list[tuple[dict[str, Any], ResourceNode]] = [(result, node)]
    while stack:
        out, current = stack.pop()
        for name, child in current._children.items():
            key = f"{name}()" if isinstance(child, MethodNode) else name
            if isinstance(child, MethodNode) and not child._children:
                out[key] = None
                continue
            out[key] = {}
            stack.append((out[key], child))
    return result


def resolve_method(node: ResourceNode, dotted_path: str) -> MethodNode:
    """Look up a method by dotted path, e.g. ``"files.permissions.list"``.

    Raises:
        ArgumentError: If the path does not name a method.
    """
    current: ResourceNode = node
    for part in dotted_path.split("."):
        if part not in current:
            raise ArgumentError(f"Unknown method {dotted_path!r}")
        current = current[part]
    if not isinstance(current, MethodNode):
        raise ArgumentError(f"{dotted_path!r} is a resource, not a method")
    return current


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _simple_upload_path(method: Mapping[str, Any]) -> Optional[str]:
    media = method.get("mediaUpload")
    protocols = media.get("protocols") if isinstance(media, Mapping) else None
    simple = protocols.get("simple") if isinstance(protocols, Mapping) else None
    path = simple.get("path") if isinstance(simple, Mapping) else None
    return path if isinstance(path, str) and path else None
