"""FastAPI middleware package for cross-cutting request/response concerns.

- **SecurityHeadersMiddleware**: Adds security headers (HSTS, X-Frame-Options, etc.)
- **RequestContextMiddleware**: Manages correlation IDs and request context
- **RequestLoggingMiddleware**: Structured logging with performance tracking
- **OriginGateMiddleware**: Turns away non-browser and foreign-origin requests
- **error_handler**: Renders framework and unexpected errors as error envelopes

Middleware are executed in a specific order to ensure proper request processing:
1. Security headers (first to process, last to respond)
2. Request context (sets up correlation IDs)
3. Request logging (logs with correlation context, including gate rejections)
4. Origin gate (before CORS, so preflights from unknown origins are refused too)
5. CORS (Starlette ``CORSMiddleware``)
"""
