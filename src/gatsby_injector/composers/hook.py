"""gatsby-node file composer.

Renders the lifecycle-hook module that chains the owner's original
``gatsby-node`` (kept in its backup) with the platform builder's hook.
All three dialects produce the same call sequence: the owner's export,
if it is a function, runs and is awaited first, then the platform's.
"""

from __future__ import annotations

from gatsby_injector.core.types import ModuleDialect, PluginDescriptor

PASSTHROUGH_TEMPLATES = {
    ModuleDialect.COMMONJS: "module.exports = require('${platform_module}');",
    ModuleDialect.ESMODULE: "export * from '${platform_module}';",
    ModuleDialect.TYPESCRIPT: "export * from '${platform_module}';",
}

COMMONJS_TEMPLATE = """\
const vercelBuilder = require('${platform_module}');
const gatsbyNode = require('${owner_module}');

const ${orig_name} = gatsbyNode.${hook_export};

gatsbyNode.${hook_export} = async (args, options) => {
  if (typeof ${orig_name} === 'function') {
    await ${orig_name}(args, options);
  }
  await vercelBuilder.${hook_export}(args, options);
};

module.exports = gatsbyNode;
"""

ESMODULE_TEMPLATE = """\
import * as vercelBuilder from '${platform_module}';
import * as gatsbyNode from '${owner_module}';

export * from '${owner_module}';

export const ${hook_export} = async (args, options) => {
  if (typeof gatsbyNode.${hook_export} === 'function') {
    await gatsbyNode.${hook_export}(args, options);
  }
  await vercelBuilder.${hook_export}(args, options);
};
"""

TYPESCRIPT_TEMPLATE = """\
import type { GatsbyNode } from 'gatsby';
import * as vercelBuilder from '${platform_module}';
import * as gatsbyNode from '${owner_module}';

export * from '${owner_module}';

export const ${hook_export}: GatsbyNode['${hook_export}'] = async (args, options) => {
  if (typeof (gatsbyNode as any).${hook_export} === 'function') {
    await (gatsbyNode as any).${hook_export}(args, options);
  }
  await vercelBuilder.${hook_export}(args, options);
};
"""

CHAINED_TEMPLATES = {
    ModuleDialect.COMMONJS: COMMONJS_TEMPLATE,
    ModuleDialect.ESMODULE: ESMODULE_TEMPLATE,
    ModuleDialect.TYPESCRIPT: TYPESCRIPT_TEMPLATE,
}


def _render(template: str, values: dict[str, str]) -> str:
    content = template
    for key, value in values.items():
        content = content.replace("${" + key + "}", value)
    return content


def compose_hook_file(
    dialect: ModuleDialect,
    owner_module: str | None,
    plugin: PluginDescriptor,
) -> str:
    """Render the gatsby-node module text.

    Args:
        dialect: Module syntax to emit.
        owner_module: Relative specifier of the owner's backup
            (e.g. ``./gatsby-node.js.__vercel_builder_backup__.js``), or
            None when the project never had a gatsby-node file.
        plugin: The plugin whose hook module is chained in.

    Returns:
        The file content. Without an owner module this is a one-line
        re-export of the platform hook module.
    """
    if not plugin.chains_hook:
        raise ValueError(f"Plugin '{plugin.name}' does not provide a lifecycle hook")

    hook_export = plugin.hook_export
    values = {
        "platform_module": plugin.hook_specifier,
        "hook_export": hook_export,
    }

    if owner_module is None:
        return _render(PASSTHROUGH_TEMPLATES[dialect], values)

    values["owner_module"] = owner_module
    values["orig_name"] = "orig" + hook_export[0].upper() + hook_export[1:]
    return _render(CHAINED_TEMPLATES[dialect], values)
