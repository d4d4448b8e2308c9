"""gatsby-config file composer.

Renders a config module that shallow-copies the owner's configuration
and appends the platform plugins missing from its ``plugins`` list. An
entry already present, either as the bare package name or as a
``{ resolve: <package> }`` record, is left alone. The owner's array is
copied before it is extended, never mutated in place.
"""

from __future__ import annotations

import json

from gatsby_injector.core.types import ModuleDialect, PluginDescriptor

FRESH_EXPORTS = {
    ModuleDialect.COMMONJS: "module.exports = ${config};",
    ModuleDialect.ESMODULE: "export default ${config};",
    ModuleDialect.TYPESCRIPT: "export default ${config};",
}

HEADERS = {
    ModuleDialect.COMMONJS: """\
const userConfig = require(${owner_module});

const preferDefault = m => (m && m.default) || m;
""",
    ModuleDialect.ESMODULE: """\
import userConfig from ${owner_module};

const preferDefault = (m) => (m && m.default) || m;
""",
    ModuleDialect.TYPESCRIPT: """\
import userConfig from ${owner_module};
import type { PluginRef } from "gatsby";

const preferDefault = (m: any) => (m && m.default) || m;
""",
}

PLUGIN_MATCHERS = {
    ModuleDialect.COMMONJS: """\
    (p) => p && (p === plugin || p.resolve === plugin)""",
    ModuleDialect.ESMODULE: """\
    (p) => p && (p === plugin || p.resolve === plugin)""",
    ModuleDialect.TYPESCRIPT: """\
    (p: PluginRef) =>
      p && (p === plugin || p.resolve === plugin)""",
}

BODY_TEMPLATE = """\

const vercelConfig = Object.assign(
  {},
  preferDefault(userConfig)
);

if (!vercelConfig.plugins) {
  vercelConfig.plugins = [];
}

for (const plugin of ${plugins}) {
  const hasPlugin = vercelConfig.plugins.find(
${matcher}
  );

  if (!hasPlugin) {
    vercelConfig.plugins = vercelConfig.plugins.slice();
    vercelConfig.plugins.push(plugin);
  }
}
"""

FOOTERS = {
    ModuleDialect.COMMONJS: "module.exports = vercelConfig;\n",
    ModuleDialect.ESMODULE: "\nexport default vercelConfig;\n",
    ModuleDialect.TYPESCRIPT: "\nexport default vercelConfig;\n",
}


def _js_literal(value: object) -> str:
    """Serialize like JavaScript's ``JSON.stringify`` (compact, unescaped)."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def compose_config_file(
    dialect: ModuleDialect,
    owner_module: str | None,
    plugins: list[PluginDescriptor] | tuple[PluginDescriptor, ...],
) -> str:
    """Render the gatsby-config module text.

    Args:
        dialect: Module syntax to emit.
        owner_module: Relative specifier of the owner's backup, or None
            when the project never had a gatsby-config file.
        plugins: Plugins to ensure in the ``plugins`` list, in order.
    """
    packages = [p.package for p in plugins]

    if owner_module is None:
        config = _js_literal({"plugins": packages})
        return FRESH_EXPORTS[dialect].replace("${config}", config)

    header = HEADERS[dialect].replace("${owner_module}", _js_literal(owner_module))
    body = (
        BODY_TEMPLATE.replace("${plugins}", _js_literal(packages))
        .replace("${matcher}", PLUGIN_MATCHERS[dialect])
    )
    return header + body + FOOTERS[dialect]
