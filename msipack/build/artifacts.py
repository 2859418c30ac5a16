"""
构建产物相关的协作者

- 安装包文件名模板展开
- 面向发布渠道的安全文件名
- 签名钩子
- 产物创建通知
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from ..config.schema import Arch, ProductModel, SigningModel
from ..utils.logging import info, debug, LogStage

_MACRO_PATTERN = re.compile(r"\$\{([A-Za-z]+)\}")
_SAFE_NAME_PATTERN = re.compile(r"^[0-9A-Za-z._-]+$")
_UNSAFE_CHARS = re.compile(r"[^0-9A-Za-z._-]+")


def expand_artifact_name(pattern: str, product: ProductModel, ext: str, arch: Arch) -> str:
    """展开文件名模板

    支持 ${productName} ${name} ${version} ${arch} ${ext}，未知宏保持原样。
    """
    values = {
        "productName": product.name,
        "name": product.product_filename or product.name,
        "version": product.version,
        "arch": arch.value,
        "ext": ext,
    }

    def replace(match: re.Match) -> str:
        return values.get(match.group(1), match.group(0))

    return _MACRO_PATTERN.sub(replace, pattern)


def is_safe_artifact_name(name: str) -> bool:
    return bool(_SAFE_NAME_PATTERN.match(name))


def compute_safe_artifact_name(suggested_name: str, product: ProductModel, ext: str, arch: Arch) -> Optional[str]:
    """计算可安全上传的文件名

    Returns:
        Optional[str]: 原名已安全时返回 None；仅空格不合法时把空格换成短横线；
        否则返回 ``{name}-{version}-{arch}.{ext}``
    """
    if is_safe_artifact_name(suggested_name):
        return None

    dashed = suggested_name.replace(" ", "-")
    if is_safe_artifact_name(dashed):
        return dashed

    name = _UNSAFE_CHARS.sub("-", product.product_filename or product.name).strip("-") or "app"
    return f"{name}-{product.version}-{arch.value}.{ext}"


@dataclass
class ArtifactCreatedEvent:
    """产物创建事件"""
    file: Path
    arch: Arch
    safe_artifact_name: Optional[str]
    target: str
    is_write_update_info: bool = False


ArtifactListener = Callable[[ArtifactCreatedEvent], None]
Signer = Callable[[Path], None]


class NoopSigner:
    """未配置签名时使用"""

    def __call__(self, artifact_path: Path) -> None:
        debug(f"未配置签名，跳过: {artifact_path.name}", stage=LogStage.SIGN)


class CommandSigner:
    """通过工具执行器调用签名工具（如 signtool.exe）"""

    def __init__(self, command: str, args: List[str], vm, timeout: Optional[float] = None):
        self.command = command
        self.args = args
        self.vm = vm
        self.timeout = timeout

    def __call__(self, artifact_path: Path) -> None:
        vm_file = self.vm.to_vm_file(artifact_path)
        args = [arg.replace("${file}", vm_file) for arg in self.args]
        info(f"签名: {artifact_path.name}", stage=LogStage.SIGN)
        self.vm.exec(self.vm.to_vm_file(self.command), args, cwd=artifact_path.parent, timeout=self.timeout)


def create_signer(signing: SigningModel, vm, timeout: Optional[float] = None) -> Signer:
    """按配置创建签名钩子"""
    if not signing.command:
        return NoopSigner()
    return CommandSigner(signing.command, list(signing.args), vm, timeout)


class ArtifactCollector:
    """收集产物事件的监听器"""

    def __init__(self):
        self.events: List[ArtifactCreatedEvent] = []

    def __call__(self, event: ArtifactCreatedEvent) -> None:
        self.events.append(event)
