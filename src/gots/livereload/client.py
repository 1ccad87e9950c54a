"""JavaScript served to pages that opt into live reload."""
from __future__ import annotations

CLIENT_CODE = """\
if ('EventSource' in window) {
  (function() {
    var lastMod = '%(last_mod)s';
    function connect() {
      var source = new EventSource('//%(host)s/events?lastMod=' + lastMod);
      source.onmessage = function(msg) {
        if (msg.data == 'reload') {
          window.location.reload();
        }
      };
      source.onerror = function(evt) {
        console.log(evt, 'Connection error');
        source.close();
        setTimeout(connect, 5000);
      };
      console.log('Live reload enabled.');
    }
    connect();
  })();
}
"""


def render_client(host: str, last_mod: int) -> str:
    """Client script bound to the serving host and the current change stamp."""
    return CLIENT_CODE % {"host": host, "last_mod": last_mod}
