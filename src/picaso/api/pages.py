"""HTML pages served by the storefront."""

from html import escape

from picaso.domain.orders import OrderConfirmation


def format_amount(amount_cents: int, currency: str) -> str:
    """Format a minor-unit amount for display."""
    value = amount_cents / 100
    if currency.lower() == "usd":
        return f"${value:.2f}"
    return f"{value:.2f} {currency.upper()}"


def render_confirmation(
    confirmation: OrderConfirmation, amount: str, contact_email: str
) -> str:
    """Render the post-payment confirmation page."""
    return _CONFIRMATION_HTML.format(
        prompt=escape(confirmation.prompt),
        image_url=escape(confirmation.image_url, quote=True),
        session_id=escape(confirmation.session_id),
        amount=escape(amount),
        contact_email=escape(contact_email),
    )


_CONFIRMATION_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Payment Successful - PICASO</title>
    <style>
      body {{ font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }}
      img {{ max-width: 360px; display: block; margin: 1rem 0; }}
      button {{ padding: 0.5rem 1rem; }}
    </style>
  </head>
  <body>
    <h1>Payment successful!</h1>
    <p>"{prompt}"</p>
    <img src="{image_url}" alt="Your artwork" />
    <p>Your order is confirmed! You'll receive an email with tracking details soon.</p>
    <p>Order ID: {session_id}</p>
    <p>Amount: {amount}</p>
    <p>For enquiries: {contact_email}</p>
    <button onclick="window.location.href='/'">Create Another Artwork</button>
  </body>
</html>
"""

STOREFRONT_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>PICASO</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      textarea { width: 420px; height: 5rem; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      img { max-width: 360px; display: block; margin: 1rem 0; }
      .error { color: #b00020; }
    </style>
  </head>
  <body>
    <h1>PICASO</h1>
    <textarea id="prompt" placeholder="Describe your artwork"></textarea>
    <div>
      <button onclick="generate()">Generate</button>
      <button onclick="shuffle()">Shuffle</button>
      <button onclick="checkout()">Order canvas</button>
    </div>
    <p id="message"></p>
    <img id="preview" hidden alt="Generated artwork" />
    <script>
      let current = null;
      function show(text, isError) {
        const el = document.getElementById('message');
        el.textContent = text;
        el.className = isError ? 'error' : '';
      }
      async function post(path, body) {
        const res = await fetch(path, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body)
        });
        return res.json();
      }
      function preview(data) {
        if (!data.success) { show(data.error || 'Something went wrong.', true); return; }
        current = { imageUrl: data.imageUrl, prompt: data.prompt };
        const img = document.getElementById('preview');
        img.src = data.imageUrl;
        img.hidden = false;
        show(data.prompt, false);
      }
      async function generate() {
        show('Generating...', false);
        preview(await post('/api/generate-image', {
          prompt: document.getElementById('prompt').value
        }));
      }
      async function shuffle() {
        if (!current) { show('Generate an image first.', true); return; }
        show('Generating variation...', false);
        preview(await post('/api/generate-variation', { basePrompt: current.prompt }));
      }
      async function checkout() {
        if (!current) { show('Generate an image first.', true); return; }
        const data = await post('/api/create-checkout-session', current);
        if (data.url) { window.location.href = data.url; return; }
        show(data.error || 'Checkout failed.', true);
      }
    </script>
  </body>
</html>
"""
