# src/scrapers/element_picker.py

"""In-page scripts for interactive price-selector discovery.

``PICKER_SCRIPT`` draws a red outline around the element under the
pointer and resolves with a CSS path for the element that is clicked
(or ``null`` on Escape / cancellation).  The path is ``#id`` when the
clicked element has an id, otherwise a chain of
``tag.class:nth-of-type(k)`` segments from the element up to, but not
including, ``body``.

All listeners, the outline and the hint banner are removed before the
promise settles.  ``TEARDOWN_SCRIPT`` cancels a pick that is still
pending, which the provider runs on timeout.
"""

PICKER_GLOBAL = "__priceTrackerPicker"

PICKER_SCRIPT = """
() => new Promise((resolve) => {
    const previous = window.%(state)s;
    if (previous) previous.cancel();

    const overlay = document.createElement("div");
    Object.assign(overlay.style, {
        position: "fixed", pointerEvents: "none",
        border: "2px solid red", zIndex: "2147483647",
        top: "0px", left: "0px", width: "0px", height: "0px",
    });
    const banner = document.createElement("div");
    banner.textContent =
        "Click the price element you want to track (Esc to cancel).";
    Object.assign(banner.style, {
        position: "fixed", top: "0", left: "0", right: "0",
        padding: "8px", background: "#b91c1c", color: "#fff",
        font: "14px sans-serif", textAlign: "center",
        pointerEvents: "none", zIndex: "2147483647",
    });
    document.body.appendChild(overlay);
    document.body.appendChild(banner);

    const cssPath = (el) => {
        if (el.id) return "#" + CSS.escape(el.id);
        if (el === document.body) return "body";
        const parts = [];
        while (el && el.nodeType === 1 && el !== document.body) {
            let part = el.nodeName.toLowerCase();
            const raw = typeof el.className === "string" ? el.className : "";
            const classes = raw.trim().split(/\\s+/).filter(Boolean);
            if (classes.length) {
                part += "." + classes.map((c) => CSS.escape(c)).join(".");
            }
            const parent = el.parentElement;
            if (parent) {
                const same = Array.from(parent.children).filter(
                    (sib) => sib.nodeName === el.nodeName
                );
                if (same.length > 1) {
                    part += ":nth-of-type(" + (same.indexOf(el) + 1) + ")";
                }
            }
            parts.unshift(part);
            el = parent;
        }
        return parts.join(" > ");
    };

    const onMove = (event) => {
        const rect = event.target.getBoundingClientRect();
        Object.assign(overlay.style, {
            top: rect.top + "px", left: rect.left + "px",
            width: rect.width + "px", height: rect.height + "px",
        });
    };

    let done = false;
    const finish = (value) => {
        if (done) return;
        done = true;
        document.removeEventListener("mousemove", onMove, true);
        document.removeEventListener("click", onClick, true);
        document.removeEventListener("keydown", onKey, true);
        overlay.remove();
        banner.remove();
        delete window.%(state)s;
        resolve(value);
    };

    const onClick = (event) => {
        event.preventDefault();
        event.stopPropagation();
        finish(cssPath(event.target));
    };

    const onKey = (event) => {
        if (event.key === "Escape") finish(null);
    };

    document.addEventListener("mousemove", onMove, true);
    document.addEventListener("click", onClick, true);
    document.addEventListener("keydown", onKey, true);
    window.%(state)s = { cancel: () => finish(null) };
})
""" % {"state": PICKER_GLOBAL}

TEARDOWN_SCRIPT = """
() => {
    const state = window.%(state)s;
    if (state) state.cancel();
}
""" % {"state": PICKER_GLOBAL}
