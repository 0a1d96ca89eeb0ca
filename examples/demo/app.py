"""Demo — every gate in one small app.

Public pages, a CSRF-protected form, a public JSON API that skips CSRF
and a private API that needs a bearer token (and therefore skips CSRF
too). Touch ``.maintenance`` next to this file to take it offline.

Run:
    wicket run examples.demo.app:app
"""

from pathlib import Path

from wicket import App, AppConfig, escape, json_response

HERE = Path(__file__).parent

config = AppConfig.from_mapping(
    {
        "debug": True,
        "maintenance_file": HERE / ".maintenance",
        "maintenance_page": HERE / "maintenance.html",
        "security": {
            "csrf": {"exempt": ["/api/public*"]},
            "bearer": {
                "enabled": True,
                "tokens": ["secret-token-123"],
                # /api/private is not listed, so it needs the token
                "exempt": [
                    "/api/public*",
                    "/",
                    "/form",
                    "/hello*",
                    "/missing",
                    "/error",
                    "/api/status",
                ],
            },
        },
    }
)

app = App(config)


@app.error(404)
def not_found():
    return "<h1>Custom 404: Page Not Found</h1>"


@app.get("/")
def index(ctx):
    return """<h1>Welcome to wicket</h1>
<ul>
    <li><a href="/hello/World">Hello World (Param)</a></li>
    <li><a href="/api/status">API Status (JSON)</a></li>
    <li><a href="/form">CSRF Form Test</a></li>
    <li><a href="/error">Trigger 500 Error</a></li>
    <li><a href="/missing">Trigger 404 Error</a></li>
</ul>"""


@app.get("/hello/:name")
def hello(ctx, name):
    return f"Hello, {escape(name)}"


@app.get("/api/status")
def status(ctx):
    return json_response({"status": "ok", "framework": "wicket", "version": "1.0.0"})


@app.get("/form")
def show_form(ctx):
    return f"""<h2>CSRF Protection Test</h2>
<form method="post" action="/form">
    {ctx.csrf_field()}
    <input type="text" name="message" placeholder="Enter message">
    <button type="submit">Submit</button>
</form>"""


@app.post("/form")
def submit_form(ctx):
    message = ctx.input("message", "")
    return f"Form Submitted! Message: {escape(message)}<br><a href='/'>Back to Home</a>"


@app.post("/api/public")
def public_api(ctx):
    return {"status": "public data", "data": dict(ctx.form)}


@app.post("/api/private")
def private_api(ctx):
    return {"status": "private data", "user": "authorized"}


@app.get("/error")
def error(ctx):
    raise RuntimeError("This is a simulated critical error!")


if __name__ == "__main__":
    app.run()
