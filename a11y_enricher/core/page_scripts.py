from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PageScript:
    """A JavaScript function body shipped into the page.

    Arguments arrive as ``arguments[i]``; async scripts report through the
    trailing callback argument. Only serializable values cross back.
    """

    name: str
    source: str
    is_async: bool = False


_ANCESTRY_HELPER = r"""
const describeAncestry = (node) => {
  const chain = [];
  let current = node;
  while (current && current.nodeType === 1) {
    chain.push({
      tag: current.tagName.toLowerCase(),
      id: current.id || "",
      class_name: typeof current.className === "string"
        ? current.className
        : (current.getAttribute("class") || ""),
    });
    current = current.parentElement;
  }
  return chain;
};

const visibleText = (node) => (node.innerText || node.textContent || "").replace(/\s+/g, " ").trim();
"""

PAGE_TEXT_SCRIPT = PageScript(
    name="page_text",
    source=r"""
const root = document.querySelector("article") || document.querySelector("main") || document.body;
if (!root) {
  return { success: false, title: document.title || "", text_content: "" };
}
const text = (root.innerText || root.textContent || "").replace(/\s+/g, " ").trim();
return { success: text.length > 0, title: document.title || "", text_content: text };
""",
)

COLLECT_IMAGES_SCRIPT = PageScript(
    name="collect_images",
    source=_ANCESTRY_HELPER
    + r"""
const items = [];
for (const img of document.querySelectorAll("img")) {
  items.push({
    kind: "img",
    src: img.src || "",
    data_src: img.getAttribute("data-src") || "",
    lazy_src: img.getAttribute("data-lazy-src") || "",
    alt: img.getAttribute("alt") || "",
    width: img.naturalWidth || img.width || 0,
    height: img.naturalHeight || img.height || 0,
    in_figure: Boolean(img.closest("figure")),
    ancestry: describeAncestry(img),
  });
}
for (const div of document.querySelectorAll("div")) {
  const background = window.getComputedStyle(div).backgroundImage;
  if (!background || background === "none") continue;
  const rect = div.getBoundingClientRect();
  items.push({
    kind: "background",
    background_image: background,
    aria_label: div.getAttribute("aria-label") || "",
    rect_width: rect.width,
    rect_height: rect.height,
    in_figure: Boolean(div.closest("figure")),
    ancestry: describeAncestry(div),
  });
}
return { base_url: document.baseURI, items: items };
""",
)

COLLECT_LINKS_SCRIPT = PageScript(
    name="collect_links",
    source=_ANCESTRY_HELPER
    + r"""
const items = [];
for (const anchor of document.querySelectorAll("a[href]")) {
  items.push({
    href: anchor.href || "",
    raw_href: anchor.getAttribute("href") || "",
    text: visibleText(anchor),
    title: anchor.getAttribute("title") || "",
    aria_label: anchor.getAttribute("aria-label") || "",
    ancestry: describeAncestry(anchor),
  });
}
return { base_url: document.baseURI, items: items };
""",
)

COLLECT_BUTTONS_SCRIPT = PageScript(
    name="collect_buttons",
    source=_ANCESTRY_HELPER
    + r"""
const selectors = [
  "button",
  '[role="button"]',
  'input[type="button"]',
  'input[type="submit"]',
  'input[type="reset"]',
];
const items = [];
for (const node of document.querySelectorAll(selectors.join(","))) {
  const isInput = node.tagName.toLowerCase() === "input";
  const parent = node.parentElement;
  items.push({
    tag: node.tagName.toLowerCase(),
    text: isInput ? (node.value || "").trim() : visibleText(node),
    aria_label: node.getAttribute("aria-label") || "",
    parent_context: parent ? visibleText(parent).slice(0, 200) : "",
    ancestry: describeAncestry(node),
  });
}
return { base_url: document.baseURI, items: items };
""",
)

SNAPSHOT_IMAGE_SCRIPT = PageScript(
    name="snapshot_image",
    is_async=True,
    source=r"""
const imageUrl = arguments[0];
const selector = arguments[1];
const done = arguments[arguments.length - 1];

const canvasSnapshot = (element) => {
  const canvas = document.createElement("canvas");
  canvas.width = element.naturalWidth || element.width;
  canvas.height = element.naturalHeight || element.height;
  const context = canvas.getContext("2d");
  if (!context) throw new Error("Could not get canvas context");
  context.drawImage(element, 0, 0);
  try {
    return canvas.toDataURL("image/jpeg", 0.9);
  } catch (error) {
    return canvas.toDataURL("image/png");
  }
};

(async () => {
  let element = null;
  try {
    element = document.querySelector(selector);
  } catch (error) {
    element = null;
  }
  const attempts = [];
  if (element instanceof HTMLImageElement && element.complete && element.naturalWidth > 0) {
    attempts.push("canvas");
    try {
      done({ data_uri: canvasSnapshot(element), strategy: "canvas", attempts: attempts });
      return;
    } catch (error) {
      attempts.push(`canvas failed: ${error}`);
    }
  }
  attempts.push("fetch");
  try {
    const response = await fetch(imageUrl);
    if (!response.ok) throw new Error(`Failed to fetch: ${response.status}`);
    const blob = await response.blob();
    const dataUri = await new Promise((resolve, reject) => {
      const reader = new FileReader();
      reader.onloadend = () => resolve(reader.result);
      reader.onerror = reject;
      reader.readAsDataURL(blob);
    });
    done({ data_uri: dataUri, strategy: "fetch", attempts: attempts });
  } catch (error) {
    done({ data_uri: null, strategy: null, attempts: attempts, error: String(error) });
  }
})();
""",
)

APPLY_ATTRIBUTE_SCRIPT = PageScript(
    name="apply_attribute",
    source=r"""
const selector = arguments[0];
const attribute = arguments[1];
const value = arguments[2];
let element = null;
try {
  element = document.querySelector(selector);
} catch (error) {
  return { found: false, error: String(error) };
}
if (!element) {
  return { found: false, error: "Element not found" };
}
let target = attribute;
if (attribute === "alt" && !(element instanceof HTMLImageElement)) {
  target = "aria-label";
}
const changed = element.getAttribute(target) !== value;
element.setAttribute(target, value);
return { found: true, attribute: target, changed: changed };
""",
)
