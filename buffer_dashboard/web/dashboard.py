"""Single-page browser UI for the buffer dashboard.

The page is self-contained and polls ``/api/context`` every few seconds;
``/api/handoff`` is fetched on demand when the handoff panel is expanded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.responses import HTMLResponse

if TYPE_CHECKING:
    from fastapi import FastAPI


def get_dashboard_html() -> str:
    """Return the full self-contained HTML page for the dashboard."""
    return _DASHBOARD_HTML


def register_dashboard_routes(app: "FastAPI") -> None:
    """Serve the dashboard page at every path no API route claims."""

    @app.get("/{path:path}", include_in_schema=False)
    async def dashboard_page(path: str):
        return HTMLResponse(get_dashboard_html())


_DASHBOARD_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Buffer Dashboard</title>
<style>
  :root {
    --bg: #0f1117; --panel: #181b24; --border: #2a2f3d; --text: #d7dae0;
    --dim: #7c8293; --ok: #4ec27a; --warn: #e0b341; --bad: #e0564f; --accent: #5b9cf0;
  }
  * { box-sizing: border-box; }
  body {
    margin: 0; padding: 20px; background: var(--bg); color: var(--text);
    font: 14px/1.45 -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
  }
  header { display: flex; align-items: baseline; gap: 14px; margin-bottom: 16px; }
  header h1 { font-size: 20px; margin: 0; }
  header .meta { color: var(--dim); font-size: 12px; }
  .grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(320px, 1fr)); gap: 14px; }
  .panel { background: var(--panel); border: 1px solid var(--border); border-radius: 8px; padding: 14px; }
  .panel h2 { font-size: 12px; text-transform: uppercase; letter-spacing: 0.06em; color: var(--dim); margin: 0 0 10px; }
  .big { font-size: 28px; font-weight: 600; }
  .dim { color: var(--dim); }
  .bar { position: relative; height: 14px; background: #232735; border-radius: 7px; overflow: hidden; margin: 10px 0 4px; }
  .bar .fill { height: 100%; background: var(--accent); transition: width 0.4s; }
  .bar .wrap { position: absolute; top: 0; bottom: 0; width: 2px; background: var(--warn); }
  .ok { color: var(--ok); } .warn { color: var(--warn); } .bad { color: var(--bad); }
  table { width: 100%; border-collapse: collapse; font-size: 13px; }
  td, th { padding: 4px 6px; text-align: left; border-bottom: 1px solid var(--border); }
  th { color: var(--dim); font-weight: 500; }
  td.num, th.num { text-align: right; font-variant-numeric: tabular-nums; }
  ul { margin: 4px 0 0; padding-left: 18px; }
  pre { white-space: pre-wrap; font-size: 12px; max-height: 420px; overflow: auto; background: #11141b; padding: 10px; border-radius: 6px; }
  button { background: #232735; color: var(--text); border: 1px solid var(--border); border-radius: 5px; padding: 4px 10px; cursor: pointer; }
  #error { display: none; background: #3a1d1d; border: 1px solid var(--bad); color: #f3b7b3; padding: 10px; border-radius: 6px; margin-bottom: 14px; }
</style>
</head>
<body>
<header>
  <h1 id="label">Buffer Dashboard</h1>
  <span class="meta" id="model"></span>
  <span class="meta" id="updated"></span>
</header>
<div id="error"></div>
<div class="grid">
  <section class="panel">
    <h2>Context Usage</h2>
    <div class="big" id="ctx-pct">--</div>
    <div class="dim" id="ctx-tokens">waiting for data</div>
    <div class="bar"><div class="fill" id="ctx-fill" style="width:0%"></div><div class="wrap" id="ctx-wrap" style="left:50%"></div></div>
    <div class="dim" id="ctx-source"></div>
    <table id="usage-table"></table>
  </section>
  <section class="panel">
    <h2>Velocity</h2>
    <div class="big" id="velocity">--</div>
    <div class="dim">tokens / minute (smoothed)</div>
    <p id="wrap-eta" class="dim"></p>
    <p id="session-start" class="dim"></p>
  </section>
  <section class="panel">
    <h2>Live Session</h2>
    <div id="live" class="dim">No live session data.</div>
  </section>
  <section class="panel">
    <h2>Handoff</h2>
    <div id="handoff" class="dim">No HANDOFF.md.</div>
    <p><button id="handoff-toggle">Show full handoff</button></p>
    <pre id="handoff-raw" style="display:none"></pre>
  </section>
  <section class="panel">
    <h2>Boot Payload</h2>
    <table id="boot-table"></table>
    <p class="dim" id="boot-extra"></p>
  </section>
</div>
<script>
(function() {
  var POLL_MS = 5000;

  function $(id) { return document.getElementById(id); }

  function esc(value) {
    return String(value === null || value === undefined ? '' : value)
      .split('&').join('&amp;')
      .split('<').join('&lt;')
      .split('>').join('&gt;')
      .split('"').join('&quot;');
  }

  function fmt(n) {
    if (n === null || n === undefined) return '--';
    return Number(n).toLocaleString();
  }

  function ago(iso) {
    if (!iso) return '';
    var t = new Date(iso).getTime();
    if (isNaN(t)) return '';
    var s = Math.max(0, Math.round((Date.now() - t) / 1000));
    if (s < 60) return s + 's ago';
    if (s < 3600) return Math.round(s / 60) + 'm ago';
    return Math.round(s / 3600) + 'h ago';
  }

  function showError(msg) {
    var el = $('error');
    if (msg) { el.textContent = msg; el.style.display = 'block'; }
    else { el.textContent = ''; el.style.display = 'none'; }
  }

  function renderUsage(d) {
    var win = d.contextWindow || 0;
    var used = d.contextUsed;
    if (used === null || used === undefined || !win) {
      $('ctx-pct').textContent = '--';
      $('ctx-tokens').textContent = 'usage unavailable';
      $('ctx-fill').style.width = '0%';
      $('usage-table').innerHTML = '';
    } else {
      var pct = Math.min(100, used / win * 100);
      var cls = pct >= 50 ? 'bad' : (pct >= 35 ? 'warn' : 'ok');
      $('ctx-pct').innerHTML = '<span class="' + cls + '">' + pct.toFixed(1) + '%</span>';
      $('ctx-tokens').textContent = fmt(used) + ' / ' + fmt(win) + ' tokens';
      $('ctx-fill').style.width = pct + '%';
      var u = d.usage || {};
      $('usage-table').innerHTML =
        '<tr><th>Input</th><td class="num">' + fmt(u.input) + '</td></tr>' +
        '<tr><th>Cache read</th><td class="num">' + fmt(u.cacheRead) + '</td></tr>' +
        '<tr><th>Cache write</th><td class="num">' + fmt(u.cacheWrite) + '</td></tr>' +
        '<tr><th>Output</th><td class="num">' + fmt(u.output) + '</td></tr>';
    }
    $('ctx-source').textContent = 'source: ' + (d.contextSource || 'unavailable');
  }

  function renderVelocity(d) {
    $('velocity').textContent = fmt(d.velocity);
    if (d.minutesToWrap === null || d.minutesToWrap === undefined) {
      $('wrap-eta').textContent = 'Wrap ETA: unknown';
    } else {
      var m = d.minutesToWrap;
      var text = m >= 60 ? Math.floor(m / 60) + 'h ' + (m % 60) + 'm' : m + 'm';
      $('wrap-eta').textContent = 'Wrap ETA: ~' + text + ' at current pace';
    }
    $('session-start').textContent = d.sessionStart ? 'Session started ' + ago(d.sessionStart) : '';
  }

  function renderLive(live) {
    var el = $('live');
    if (!live) { el.className = 'dim'; el.textContent = 'No live session data.'; return; }
    var rows = '';
    Object.keys(live).forEach(function(k) {
      var v = live[k];
      if (typeof v === 'object' && v !== null) v = JSON.stringify(v);
      rows += '<tr><th>' + esc(k) + '</th><td>' + esc(v) + '</td></tr>';
    });
    el.className = '';
    el.innerHTML = '<table>' + rows + '</table>' +
      (live.updatedAt ? '<p class="dim">updated ' + esc(ago(live.updatedAt)) + '</p>' : '');
  }

  function renderHandoff(h) {
    var el = $('handoff');
    if (!h) { el.className = 'dim'; el.textContent = 'No HANDOFF.md.'; return; }
    var steps = (h.nextSteps || []).map(function(s) { return '<li>' + esc(s) + '</li>'; }).join('');
    el.className = '';
    el.innerHTML =
      '<p><strong>Current work:</strong> ' + esc(h.currentWork || 'none') + '</p>' +
      '<p><strong>Stopping point:</strong> ' + esc(h.stoppingPoint || 'none') + '</p>' +
      (steps ? '<p><strong>Next steps:</strong></p><ul>' + steps + '</ul>' : '') +
      '<p class="dim">' + fmt(h.openQuestions) + ' open questions, ' + fmt(h.size) +
      ' bytes, updated ' + esc(ago(h.mtime)) + '</p>';
  }

  function renderBoot(b) {
    if (!b) { $('boot-table').innerHTML = ''; $('boot-extra').textContent = ''; return; }
    var rows = '<tr><th>File</th><th class="num">Size</th><th class="num">Limit</th></tr>';
    (b.files || []).forEach(function(f) {
      rows += '<tr><td>' + esc(f.name) + '</td><td class="num ' + (f.over ? 'bad' : 'ok') + '">' +
        fmt(f.size) + '</td><td class="num">' + fmt(f.limit) + '</td></tr>';
    });
    rows += '<tr><th>Total</th><th class="num">' + fmt(b.total) + '</th><th></th></tr>';
    $('boot-table').innerHTML = rows;
    $('boot-extra').textContent = fmt(b.memoryFiles) + ' memory files (' + fmt(b.memorySize) +
      ' bytes), ' + fmt(b.skills) + ' skills';
  }

  function render(d) {
    if (d.error) { showError(d.error); return; }
    showError('');
    $('label').textContent = d.label || 'Buffer Dashboard';
    $('model').textContent = d.model || '';
    $('updated').textContent = d.updatedAt ? 'registry updated ' + ago(d.updatedAt) : '';
    renderUsage(d);
    renderVelocity(d);
    renderLive(d.live);
    renderHandoff(d.handoff);
    renderBoot(d.boot);
  }

  function poll() {
    fetch('/api/context', {cache: 'no-store'})
      .then(function(r) { return r.json(); })
      .then(render)
      .catch(function(err) { showError('Fetch failed: ' + err.message); });
  }

  $('handoff-toggle').addEventListener('click', function() {
    var pre = $('handoff-raw');
    if (pre.style.display === 'block') {
      pre.style.display = 'none';
      this.textContent = 'Show full handoff';
      return;
    }
    var btn = this;
    fetch('/api/handoff', {cache: 'no-store'})
      .then(function(r) { return r.json(); })
      .then(function(d) {
        pre.textContent = d.error ? 'Error: ' + d.error : d.content;
        pre.style.display = 'block';
        btn.textContent = 'Hide full handoff';
      })
      .catch(function(err) { pre.textContent = err.message; pre.style.display = 'block'; });
  });

  poll();
  setInterval(poll, POLL_MS);
})();
</script>
</body>
</html>
"""
