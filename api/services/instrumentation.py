"""
客户端采集脚本

页面带 retrieve_deps 参数（或 cookie）时，等待页面稳定后
上报 RequireJS 实际加载的脚本和模板，每次页面访问最多上报一次。
"""

import json

# 脚本主体；由 render_script 追加调用参数
INSTRUMENTATION_SCRIPT = """(function (route, url, bundleDir, settleDelay) {
    'use strict';

    var FLAG = 'retrieve_deps';
    var sent = false;

    function enabled() {
        if (new URLSearchParams(window.location.search).has(FLAG)) {
            document.cookie = FLAG + '=1;SameSite=Strict';
        }
        return document.cookie.split(';').some(function (item) {
            return item.trim() === FLAG + '=1';
        });
    }

    function jsDeps(context) {
        var baseUrl = context.config.baseUrl;
        return Object.keys(context.urlFetched).map(function (module) {
            return module.replace(baseUrl, '');
        });
    }

    function htmlDeps(context) {
        return Object.keys(context.defined).reduce(function (deps, module) {
            if (/^text!.+\\.html$/.test(module)) {
                deps.push(module.replace(/^text!/, ''));
            }
            return deps;
        }, []);
    }

    function report() {
        if (sent || !window.require || !require.s) {
            return;
        }
        sent = true;
        var context = require.s.contexts._;
        var deps = jsDeps(context).concat(htmlDeps(context)).filter(function (dep) {
            return dep.indexOf(bundleDir + '/') === -1;
        });
        var xhr = new XMLHttpRequest();
        xhr.open('POST', url);
        xhr.setRequestHeader('Content-Type', 'application/json;charset=utf-8');
        xhr.setRequestHeader('X-Requested-With', 'XMLHttpRequest');
        xhr.send(JSON.stringify({route: route, deps: deps, paths: context.config.paths}));
    }

    if (enabled()) {
        setTimeout(report, settleDelay);
    }
})"""

# 等待页面加载稳定的时间（毫秒）
SETTLE_DELAY_MS = 5000


def render_script(route: str, url: str, bundle_dir: str, settle_delay_ms: int = SETTLE_DELAY_MS) -> str:
    """
    生成采集脚本

    Args:
        route: 当前页面类型
        url: 采集接口地址
        bundle_dir: bundle 输出目录（已打包文件不上报）
        settle_delay_ms: 上报前等待时间

    Returns:
        可直接嵌入页面的 JavaScript
    """
    args = ", ".join(json.dumps(value) for value in (route, url, bundle_dir, settle_delay_ms))
    return f"{INSTRUMENTATION_SCRIPT}({args});\n"
