"""HTTP layer: application factory, middleware, routes and schemas."""
