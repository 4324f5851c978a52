"""
test_codegen_vue.py - Testes da geracao de Single File Components Vue 3

Proposito:
    Validar <script setup> com ref/computed, leituras .value, diretivas
    v-if/v-for/@evento e a reexportacao de exports nomeados.
"""

from __future__ import annotations

from conftest import COUNTER_SOURCE, LIST_SOURCE, SIGNAL_SOURCE, UNTERMINATED_SOURCE
from mtmc.api import transform
from mtmc.codegen.base import TransformOptions
from mtmc.codegen.vue import attribute_value


def _vue(source: str, **options):
    return transform(source, "vue", TransformOptions(**options) if options else None)


EXPECTED_COUNTER = """\
<template>
  <div class="counter">
    <p>{{ count }}</p>
    <button @click="increment">+</button>
  </div>
</template>

<script setup>
import { ref, computed } from 'vue';

defineOptions({ name: 'Component' });

const count = ref(0);
const double = computed(() => count.value * 2);

const increment = () => {
  count.value++
};
</script>
"""


# =============================================================================
# COMPONENTE COMPLETO
# =============================================================================


def test_counter_single_file_component():
    result = _vue(COUNTER_SOURCE)
    assert result.success
    assert result.warnings == ()
    assert result.code == EXPECTED_COUNTER


def test_non_reactive_constant_has_no_value_suffix():
    code = _vue("$title = 'Ola'\n$shout = () => $title + '!'\n<template>{$title}</template>").code
    assert "const title = 'Ola';" in code
    assert "const shout = () => title + '!';" in code
    assert "{{ title }}" in code
    assert "from 'vue'" not in code


def test_assignment_writes_value():
    code = _vue("$count! = 0\n$reset = () => { $count = 0 }").code
    assert "count.value = 0" in code


def test_signal_variable():
    code = _vue(SIGNAL_SOURCE).code
    assert "import { ref } from 'vue';" in code
    assert "import { signal } from '../shared/ultra-modern-signal.js';" in code
    assert "const [globalCountShared, setGlobalCount] = signal.use('globalCount', 0);" in code
    assert "const globalCount = ref(globalCountShared);" in code
    assert "signal.on('globalCount', (value) => {\n  globalCount.value = value;\n});" in code
    assert "setGlobalCount(globalCount.value + 1)" in code


def test_signal_mutation_in_markup_uses_setter():
    source = SIGNAL_SOURCE.replace("click={$bump}", "click={() => $globalCount = 0}")
    assert '@click="() => setGlobalCount(0)"' in _vue(source).code


def test_async_function():
    code = _vue("$load = async ($url) => {\n  return fetch($url)\n}").code
    assert "const load = async (url) => {\n  return fetch(url)\n};" in code


# =============================================================================
# MARKUP
# =============================================================================


def test_inline_event_keeps_native_mutation():
    source = "$count! = 0\n<template><button click={() => $count++}>+</button></template>"
    assert '<button @click="() => count++">+</button>' in _vue(source).code


def test_attribute_expression_is_escaped():
    source = "$a! = 'x'\n<template><div title={$a + \"!\"}>t</div></template>"
    assert '<div :title="a + &quot;!&quot;">t</div>' in _vue(source).code


def test_attribute_value():
    assert attribute_value('a "b"') == "a &quot;b&quot;"


def test_conditional_branches():
    source = "$a! = 1\n$b! = 2\n<template>{#if $a}A{:else if $b}B{:else}C{/if}</template>"
    code = _vue(source).code
    assert (
        '<template v-if="a">A</template>'
        '<template v-else-if="b">B</template>'
        "<template v-else>C</template>"
    ) in code


def test_list_loop():
    code = _vue(LIST_SOURCE).code
    assert '<template v-for="item in items">' in code
    assert '<li :key="item.id">{{ item.name }}</li>' in code
    assert "{{ total }}" in code
    assert "const total = computed(() => items.value.length);" in code
    assert 'const items = ref([{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]);' in code


def test_loop_with_index():
    source = "$items! = []\n<template>{#each $items as item, i}<b>{i}</b>{/each}</template>"
    assert '<template v-for="(item, i) in items"><b>{{ i }}</b></template>' in _vue(source).code


def test_for_block():
    code = _vue("<template>{#for i=1 to 3}<b>{i}</b>{/for}</template>").code
    assert '<template v-for="i in Array.from({ length: 3 }, (_, index) => index + 1)"><b>{{ i }}</b></template>' in code


def test_while_block():
    result = _vue("$n! = 1\n<template>{#while $n}<p>x</p>{/while}</template>")
    assert '<template v-if="n"><p>x</p></template>' in result.code
    assert "em vue" in result.warnings[0].message


# =============================================================================
# MODULO
# =============================================================================


def test_vue_imports_are_merged():
    code = _vue("import { watch } from 'vue'\n$count! = 0").code
    assert "import { ref, watch } from 'vue';" in code
    assert code.count("from 'vue'") == 1


def test_vue_namespace_import_is_kept():
    code = _vue("import * as V from 'vue'\n$count! = 0").code
    assert "import { ref } from 'vue';" in code
    assert "import * as V from 'vue';" in code


def test_named_exports_in_plain_script_block():
    code = _vue("export const VERSION = '1.0'\n$a! = 1").code
    assert "<script>\nexport const VERSION = '1.0'\n</script>" in code
    assert "<script setup>" in code


def test_component_name_from_filename():
    code = _vue("$a! = 1", filename="user-card.mtm").code
    assert "defineOptions({ name: 'UserCard' });" in code


def test_empty_template():
    assert _vue("$a! = 1").code.startswith("<template></template>")


def test_error_component():
    result = _vue(UNTERMINATED_SOURCE)
    assert not result.success
    assert '<div class="mtm-error" role="alert">{{ message }}</div>' in result.code
    assert "const message = 'Erro de transformacao MTM em <component>: Bloco {#if} sem {/if} correspondente';" in result.code
