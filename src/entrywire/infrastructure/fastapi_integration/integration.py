from typing import Awaitable, Callable, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from entrywire.domain import IContainer

T = TypeVar("T")


def create_fastapi_dependency(container: IContainer, dependency_type: Type[T]) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that resolves from the DI container.

    This function generates a dependency function compatible with FastAPI's
    Depends() system. Registered types follow their lifetime (singleton,
    transient, or scoped); unregistered types are auto-wired.

    Args:
        container: The DI container to resolve dependencies from.
        dependency_type: The type to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> container = Container()
        >>> container.singleton(UserRepository)
        >>>
        >>> get_user_repo = create_fastapi_dependency(container, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> T:
        """Resolve the dependency from the container."""
        return container.make(dependency_type)

    return dependency


def create_scoped_dependency(dependency_type: Type[T]) -> Callable[[Request], T]:
    """Create a FastAPI dependency that resolves from the request's container.

    Requires the ScopedContainerMiddleware to be installed. Scoped entries are
    shared for the duration of the request and dropped afterwards.

    Args:
        dependency_type: The type to resolve.

    Returns:
        A callable that resolves from the container attached to the request.

    Example:
        >>> app.add_middleware(ScopedContainerMiddleware, container=container)
        >>>
        >>> get_request_context = create_scoped_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    def scoped_dependency(request: Request) -> T:
        """Resolve from the request's container."""
        if not hasattr(request.state, "di_container"):
            raise RuntimeError(
                "Request does not have a DI container. Did you forget to add ScopedContainerMiddleware?"
            )
        container: IContainer = request.state.di_container
        return container.make(dependency_type)

    return scoped_dependency


class ScopedContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that makes the Scoped lifetime span one HTTP request.

    Every request gets its own child container from ``create_scope()``,
    exposed on `request.state.di_container`. Singletons are shared with the
    application container, Scoped instances belong to the request and are
    dropped once the response is produced (or the endpoint failed).

    Attributes:
        container: The DI container serving the application.

    Example:
        >>> container = Container()
        >>> container.scoped(RequestContext)
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(ScopedContainerMiddleware, container=container)
    """

    def __init__(self, app: FastAPI, container: IContainer):
        """Initialize the middleware with the application's container.

        Args:
            app: The FastAPI/Starlette application.
            container: The DI container.
        """
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Create a scoped container for the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        scoped_container = self.container.create_scope()
        request.state.di_container = scoped_container

        try:
            response = await call_next(request)
            return response
        finally:
            scoped_container.clear_scoped()
