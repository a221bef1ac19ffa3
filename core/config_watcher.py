# core/config_watcher.py
# 负责监控配置文件变化并在变化时重新加载配置

import os
import threading
from typing import Any, Callable, Dict, List, Optional

from logger_config import get_logger
from core.config_manager import reload_config

logger = get_logger("ConfigWatcher")

ConfigCallback = Callable[[List[str], Dict[str, Any]], None]


class ConfigWatcher:
    def __init__(self, config_files: List[str], interval: float = 1.0):
        self.config_files = list(config_files)
        self.interval = interval
        self.file_stats: Dict[str, Optional[dict]] = {}
        self.callbacks: List[ConfigCallback] = []
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        # 初始化文件状态
        self._update_file_stats()

    @staticmethod
    def _stat(file_path: str) -> Optional[dict]:
        if not os.path.exists(file_path):
            return None
        stat = os.stat(file_path)
        return {'mtime': stat.st_mtime, 'size': stat.st_size}

    def _update_file_stats(self):
        """更新文件状态信息"""
        for file_path in self.config_files:
            try:
                self.file_stats[file_path] = self._stat(file_path)
            except OSError as e:
                logger.warning(f"无法获取文件 {file_path} 的状态: {e}")
                self.file_stats[file_path] = None

    def _check_file_changes(self) -> List[str]:
        """检查文件是否有变化（包括删除）"""
        changed_files = []
        for file_path in self.config_files:
            try:
                current_stat = self._stat(file_path)
            except OSError as e:
                logger.warning(f"检查文件 {file_path} 变化时出错: {e}")
                continue
            if self.file_stats.get(file_path) != current_stat:
                changed_files.append(file_path)
                self.file_stats[file_path] = current_stat
        return changed_files

    def add_callback(self, callback: ConfigCallback):
        """添加配置变化回调函数，参数为 (变化的文件列表, 新配置)"""
        self.callbacks.append(callback)

    def check_once(self) -> List[str]:
        """执行一次检查，有变化时重新加载配置并调用回调

        Returns:
            List[str]: 发生变化的文件列表
        """
        changed_files = self._check_file_changes()
        if not changed_files:
            return changed_files

        logger.info(f"检测到配置文件变化: {changed_files}")
        new_config = reload_config()

        for callback in self.callbacks:
            try:
                callback(changed_files, new_config)
            except Exception as e:
                logger.error(f"执行配置变化回调函数时出错: {e}", exc_info=True)
        return changed_files

    def _watch_loop(self):
        """监控循环"""
        while not self._stop_event.is_set():
            try:
                self.check_once()
            except Exception as e:
                logger.error(f"配置监控循环出错: {e}")
            self._stop_event.wait(self.interval)

    def start(self):
        """启动监控"""
        if not self.running:
            self.running = True
            self._stop_event.clear()
            self.thread = threading.Thread(target=self._watch_loop, name="ConfigWatcher", daemon=True)
            self.thread.start()
            logger.info("配置文件监控已启动")

    def stop(self):
        """停止监控"""
        if self.running:
            self.running = False
            self._stop_event.set()
            if self.thread and self.thread.is_alive():
                self.thread.join(timeout=5)
            logger.info("配置文件监控已停止")
