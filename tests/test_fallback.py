"""Tests for the fenced code block fallback extractor."""

from response2files.extractors.base import ExtractionState
from response2files.extractors.fallback_extractor import (
    FALLBACK_WARNING,
    extract_fallback,
    synthetic_name,
)


def _extract(text: str) -> ExtractionState:
    state = ExtractionState()
    extract_fallback(text, state)
    return state


class TestExtractFallback:
    def test_path_before_block(self):
        text = (
            "Here is the file:\n\nsrc/utils.ts\n```ts\n"
            "export const add = (a: number, b: number) => a + b;\n```\n"
        )
        state = _extract(text)
        assert state.files == {"src/utils.ts": "export const add = (a: number, b: number) => a + b;"}
        assert state.recovered_files == ["src/utils.ts"]
        assert state.warnings == [FALLBACK_WARNING]

    def test_path_as_heading(self):
        text = "### `src/App.css`\n```css\nbody { margin: 0; }\n```"
        assert _extract(text).files == {"src/App.css": "body { margin: 0; }"}

    def test_path_inside_block(self):
        text = "```tsx\nFile: src/App.tsx\nexport default function App() {\n  return null;\n}\n```"
        state = _extract(text)
        assert state.files == {"src/App.tsx": "export default function App() {\n  return null;\n}"}

    def test_unlabeled_block_gets_synthetic_name(self):
        text = (
            "```tsx\nimport React from 'react';\n\n"
            "export default function Card() {\n  return <div>Card</div>;\n}\n```"
        )
        state = _extract(text)
        assert list(state.files) == ["component1.tsx"]

    def test_short_unlabeled_block_skipped(self):
        assert _extract("```js\nconsole.log(1);\n```").files == {}

    def test_nothing_found(self):
        state = _extract("no code here")
        assert state.files == {}
        assert state.warnings == [FALLBACK_WARNING]


class TestSyntheticName:
    def test_component(self):
        assert synthetic_name("export default function A() {}", 1) == "component1.tsx"

    def test_module(self):
        assert synthetic_name("export const a = 1;", 2) == "module2.ts"

    def test_script(self):
        assert synthetic_name("console.log(1);", 3) == "code3.js"
