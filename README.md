# img2ascii

A small web service that converts images into ASCII art and renders short
text messages as ASCII banners, plus the library it is built on.

## Installing

```
pip install .
```

## Running the server

```
img2ascii [--host HOST] [--port PORT]
```

By default the server listens on `0.0.0.0`, port 8080, and offers:

- `GET /`: the home page, rendered from the template file.
- `GET /static/<path>`: files served from the static directory.
- `POST /upload`: a multipart form with a `file` field holding a PNG, JPEG
  or GIF image of at most 2 MiB. The response is the image as plain-text
  ASCII art, fitted within 65 columns by 54 rows.
- `POST /banner`: a form with a `bannerText` field of at most 64 characters
  (letters, digits, whitespace and `. , ! ? - _`). The response is the text
  drawn as a 50 by 15 ASCII banner.

Uploads are accepted only when both the part's declared content type
(`image/png`, `image/jpeg`, `image/gif`) and the file's leading signature
bytes name an allowed format. Each client address (taken from
`X-Forwarded-For`, then `X-Real-IP`, then the peer address) may make 10
requests per minute; further requests get status 429 with a JSON `error`
message.

## Configuration

The server reads these environment variables at start-up:

| Variable                | Default                       |
|-------------------------|-------------------------------|
| `IMG2ASCII_OUTPUT_DIR`  | `/tmp/img2ascii`              |
| `IMG2ASCII_OUTPUT_FILE` | `/tmp/img2ascii/output.txt`   |
| `IMG2ASCII_WWW_DIR`     | `/tmp/img2ascii/www`          |

Missing directories and the output file are created when the server starts.
`IMG2ASCII_WWW_DIR` is also the directory served under `/static/`.

## Files the package does not provide

The package ships no page template, stylesheet, scripts or fonts. It looks
for them relative to the working directory:

- `source/www/index.html`: the home page template. Without it the server
  does not start (`img2ascii` exits with status 1).
- `source/banners/fonts/Notable-Regular.ttf`: the banner font. Without it
  `POST /banner` answers with status 500.
- Static assets must be placed in `IMG2ASCII_WWW_DIR` by hand.

Each conversion also writes a copy of its ASCII art to `img2ascii.log` in
the working directory, when that file can be written.

## Using it from Python

```python
from img2ascii.converter import run, run_banner
from img2ascii.banners import Banner, BannerOptions, render_banner

art = run(True, "photo.png", "photo.txt")
run_banner("text.png", "text.txt", 50, 15)

txt_path = render_banner(
    Banner("Hello", "out/hello", 50, 15, BannerOptions(font="Notable-Regular"))
)
```

- `run(reverse, img_path, output_path)` fits the image into 65 by 54
  characters, maps brightness onto `@#%*o()1l=:-.` (reversed when `reverse`
  is true), writes the result and returns it.
- `run_banner(img_path, output_path, width, height)` fits into the given
  size and uses `@#*+=-:. `.
- `render_banner(banner)` draws the message, writes `<path>.png`,
  `<path>.png.resized.png` and `<path>.txt`, and returns the text file's
  path; failures raise `BannerError`.

`img2ascii.handlers.create_app(Config(...))` builds the Flask application
without rate limiting or static files; `img2ascii.app.build_app(settings)`
adds both. `img2ascii.ratelimit.RateLimiter(limit, window)` is the limiter
on its own; call `stop()` to end its cleanup thread.

## Tests

```
pip install ".[test]"
pytest
```