# Canonical web-features identifiers for the constructs the scanners emit.
# A string maps the name directly; a dict maps by associated value, with
# "*" as the fallback for values that have no entry of their own.

CSS_PROPERTY_MAPPING = {
    # Layout
    "display": {
        "grid": "grid",
        "inline-grid": "grid",
        "flex": "flexbox",
        "inline-flex": "flexbox",
        "contents": "display-contents",
        "flow-root": "flow-root",
        "inline flex": "flexbox",
        "inline grid": "grid",
        "block flex": "flexbox",
        "block grid": "grid",
    },
    "gap": "flexbox-gap",
    "grid-gap": "flexbox-gap",
    "row-gap": "flexbox-gap",
    "column-gap": "flexbox-gap",
    "grid-template-columns": {"subgrid": "subgrid", "masonry": "masonry", "*": "grid"},
    "grid-template-rows": {"subgrid": "subgrid", "masonry": "masonry", "*": "grid"},
    "grid-template-areas": "grid",
    "grid-area": "grid",
    "container-type": "container-queries",
    "container-name": "container-queries",
    "container": "container-queries",
    "aspect-ratio": "aspect-ratio",
    "position": {"sticky": "sticky-positioning", "-webkit-sticky": "sticky-positioning"},
    "inset": "inset",
    "anchor-name": "anchor-positioning",
    "position-anchor": "anchor-positioning",
    "position-area": "anchor-positioning",
    "content-visibility": "content-visibility",
    "contain": "contain",
    "overflow": {"clip": "overflow-clip"},
    "overflow-clip-margin": "overflow-clip",
    "overscroll-behavior": "overscroll-behavior",
    "scrollbar-gutter": "scrollbar-gutter",
    "scrollbar-width": "scrollbar-width",
    "scrollbar-color": "scrollbar-color",
    "scroll-snap-type": "scroll-snap",
    "scroll-snap-align": "scroll-snap",
    "scroll-behavior": "scroll-behavior",
    "scroll-timeline": "scroll-driven-animations",
    "view-timeline": "scroll-driven-animations",
    "animation-timeline": "scroll-driven-animations",
    "view-transition-name": "view-transitions",
    "text-wrap": {"balance": "text-wrap-balance", "pretty": "text-wrap-pretty"},
    "text-wrap-style": {"balance": "text-wrap-balance", "pretty": "text-wrap-pretty"},
    # Animations & Transitions
    "animation": "animations-css",
    "animation-name": "animations-css",
    "animation-duration": "animations-css",
    "animation-composition": "animation-composition",
    "transition": "transitions",
    "transition-behavior": "transition-behavior",
    "transform": "transforms2d",
    "transform-origin": "transforms2d",
    "translate": "individual-transforms",
    "rotate": "individual-transforms",
    "scale": "individual-transforms",
    # Visual
    "accent-color": "accent-color",
    "color-scheme": "color-scheme",
    "backdrop-filter": "backdrop-filter",
    "mask": "masks",
    "mask-image": "masks",
    "field-sizing": "field-sizing",
    "interpolate-size": "interpolate-size",
    # Typography
    "font-feature-settings": "font-feature-settings",
    "font-variant-numeric": "font-variant-numeric",
    "text-decoration-thickness": "text-decoration",
    "hyphens": "hyphens",
    "initial-letter": "initial-letter",
    # Box model & logical properties
    "box-sizing": "box-sizing",
    "margin-inline": "logical-properties",
    "margin-block": "logical-properties",
    "padding-inline": "logical-properties",
    "padding-block": "logical-properties",
    "inline-size": "logical-properties",
    "block-size": "logical-properties",
    "opacity": "opacity",
}

CSS_SELECTOR_MAPPING = {
    ":has": "has",
    ":is": "is",
    ":where": "where",
    ":not": "not",
    ":focus-visible": "focus-visible",
    ":focus-within": "focus-within",
    ":user-valid": "user-pseudos",
    ":user-invalid": "user-pseudos",
    ":popover-open": "popover",
    ":modal": "dialog",
    ":state": "custom-elements",
    ":defined": "custom-elements",
    ":host": "shadow-dom",
    ":nth-child": "nth-child",
    "::backdrop": "backdrop",
    "::marker": "marker",
    "::placeholder": "placeholder",
    "::file-selector-button": "file-selector-button",
    "::part": "shadow-parts",
    "::slotted": "shadow-dom",
    "::highlight": "highlight",
    "::view-transition": "view-transitions",
    "::view-transition-group": "view-transitions",
    "::target-text": "target-text",
}

CSS_FUNCTION_MAPPING = {
    "var": "custom-properties",
    "clamp": "min-max-clamp",
    "min": "min-max-clamp",
    "max": "min-max-clamp",
    "color-mix": "color-mix",
    "light-dark": "light-dark",
    "oklch": "oklab",
    "oklab": "oklab",
    "lab": "lab",
    "lch": "lab",
    "hwb": "hwb",
    "round": "stepped-value-functions",
    "mod": "stepped-value-functions",
    "rem": "stepped-value-functions",
    "sin": "trig-functions",
    "cos": "trig-functions",
    "tan": "trig-functions",
    "abs": "abs-sign",
    "sign": "abs-sign",
    "conic-gradient": "conic-gradients",
    "repeating-conic-gradient": "conic-gradients",
    "image-set": "image-set",
    "anchor": "anchor-positioning",
    "anchor-size": "anchor-positioning",
    "env": "env",
    "fit-content": "fit-content",
    "minmax": "grid",
    "repeat": "grid",
    "scroll": "scroll-driven-animations",
    "view": "scroll-driven-animations",
}

CSS_AT_RULE_MAPPING = {
    "@container": "container-queries",
    "@layer": "cascade-layers",
    "@property": "registered-custom-properties",
    "@scope": "scope",
    "@starting-style": "starting-style",
    "@counter-style": "counter-style",
    "@font-palette-values": "font-palette",
    "@view-transition": "cross-document-view-transitions",
    "@supports": {"*": "supports"},
    "@media": {
        "prefers-color-scheme": "prefers-color-scheme",
        "prefers-reduced-motion": "prefers-reduced-motion",
        "prefers-contrast": "prefers-contrast",
        "prefers-reduced-data": "prefers-reduced-data",
        "forced-colors": "forced-colors",
        "hover": "hover-pointer-media-queries",
        "any-hover": "hover-pointer-media-queries",
        "pointer": "hover-pointer-media-queries",
        "any-pointer": "hover-pointer-media-queries",
        "dynamic-range": "dynamic-range",
    },
}

JS_API_MAPPING = {
    # Fetch & Networking
    "fetch": "fetch",
    "AbortController": "aborting",
    "AbortSignal": "aborting",
    "AbortSignal.timeout": "abortsignal-timeout",
    "AbortSignal.any": "abortsignal-any",
    "Request": "fetch",
    "Response": "fetch",
    "Headers": "fetch",
    "WebSocket": "websockets",
    "WebTransport": "webtransport",
    "EventSource": "server-sent-events",
    "BroadcastChannel": "broadcast-channel",
    # Observers
    "IntersectionObserver": "intersection-observer",
    "MutationObserver": "mutationobserver",
    "ResizeObserver": "resize-observer",
    "PerformanceObserver": "performance-observer",
    "ReportingObserver": "reporting",
    # Workers
    "Worker": "dedicated-workers",
    "SharedWorker": "shared-workers",
    "navigator.serviceWorker": "service-workers",
    "ServiceWorker": "service-workers",
    "Worklet": "worklets",
    # Storage & locks
    "indexedDB": "indexeddb",
    "navigator.locks": "web-locks",
    "navigator.storage": "storage-manager",
    "navigator.storage.getDirectory": "origin-private-file-system",
    "caches": "cache-storage",
    "CompressionStream": "compression-streams",
    "DecompressionStream": "compression-streams",
    # Platform
    "navigator.clipboard": "async-clipboard",
    "navigator.share": "web-share",
    "navigator.wakeLock": "screen-wake-lock",
    "navigator.gpu": "webgpu",
    "navigator.userActivation": "user-activation",
    "document.startViewTransition": "view-transitions",
    "structuredClone": "structured-clone",
    "queueMicrotask": "queuemicrotask",
    "requestIdleCallback": "requestidlecallback",
    "scheduler.postTask": "scheduler",
    "URL": "url",
    "URLSearchParams": "url",
    "URL.canParse": "url-canparse",
    "URLPattern": "urlpattern",
    "Intl.Segmenter": "intl-segmenter",
    "Array.fromAsync": "array-fromasync",
    "Object.groupBy": "array-group",
    "Map.groupBy": "array-group",
    "Promise.withResolvers": "promise-withresolvers",
    "Promise.any": "promise-any",
    "Promise.allSettled": "promise-allsettled",
    "WeakRef": "weakrefs",
    "FinalizationRegistry": "weakrefs",
    "ReadableStream": "streams",
    "WritableStream": "streams",
    "TransformStream": "streams",
    "OffscreenCanvas": "offscreen-canvas",
    "EyeDropper": "eyedropper",
    "CloseWatcher": "closewatcher",
    "customElements": "custom-elements",
    "Notification": "notifications",
}

JS_SYNTAX_MAPPING = {
    "optional-chaining": "optional-chaining",
    "nullish-coalescing": "nullish-coalescing",
    "logical-assignment": "logical-assignments",
    "private-class-members": "class-private-fields",
    "static-initialization-block": "class-static-initialization-blocks",
    "destructuring": "destructuring",
    "template-literals": "template-literals",
    "spread": "spread",
    "arrow-functions": "arrow-functions",
    "async-await": "async-await",
    "classes": "class-syntax",
    "numeric-separators": "numeric-separators",
    "bigint": "bigint",
    "exponentiation": "exponentiation",
}

HTML_ELEMENT_MAPPING = {
    "dialog": "dialog",
    "details": "details",
    "summary": "details",
    "search": "search",
    "picture": "picture",
    "template": "template",
    "slot": "slot",
    "datalist": "datalist",
    "output": "output",
    "meter": "meter",
    "progress": "progress",
    "portal": "portals",
    "selectedcontent": "customizable-select",
    "input": {
        "color": "input-color",
        "date": "input-date-time",
        "datetime-local": "input-date-time",
        "time": "input-date-time",
        "month": "input-date-time",
        "week": "input-date-time",
        "range": "input-range",
        "number": "input-number",
    },
}

HTML_ATTRIBUTE_MAPPING = {
    "popover": "popover",
    "popovertarget": "popover",
    "inert": "inert",
    "enterkeyhint": "enterkeyhint",
    "inputmode": "inputmode",
    "fetchpriority": "fetch-priority",
    "blocking": "blocking-render",
    "loading": {"lazy": "loading-lazy"},
    "decoding": "img-decoding-async",
    "hidden": {"until-found": "hidden-until-found"},
    "contenteditable": {"plaintext-only": "contenteditable-plaintextonly"},
    "autocapitalize": "autocapitalize",
    "shadowrootmode": "declarative-shadow-dom",
    "commandfor": "invoker-commands",
    "command": "invoker-commands",
    "rel": {
        "preload": "link-rel-preload",
        "modulepreload": "link-rel-modulepreload",
        "preconnect": "link-rel-preconnect",
        "dns-prefetch": "link-rel-dns-prefetch",
        "expect": "link-rel-expect",
    },
    "type": {"module": "js-modules", "importmap": "import-maps", "speculationrules": "speculation-rules"},
    "sandbox": {"allow-downloads": "iframe-sandbox"},
}
