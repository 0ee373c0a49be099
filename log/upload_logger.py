#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
上传记录模块
按天记录每次上传的结果（JSON Lines）
"""

import os
import json
import threading
from datetime import datetime
from config.config_loader import config_loader


class UploadLogger:
    """上传记录器类"""

    def __init__(self):
        self.log_path = config_loader.get('log.path', './s3put_log/')
        self.today = datetime.now().strftime('%Y-%m-%d')

        os.makedirs(self.log_path, exist_ok=True)

        self.success_uploads = 0
        self.failed_uploads = 0
        self.failed_list = []

        self.lock = threading.Lock()

    def log_upload(self, bucket, object_path, local_path, file_size, duration, status, error_msg=""):
        """
        记录单次上传

        Args:
            bucket (str): 桶名称
            object_path (str): 对象路径
            local_path (str): 本地文件路径
            file_size (int): 文件大小（字节），读取失败时为None
            duration (float): 耗时（秒）
            status (str): success/failed
            error_msg (str): 错误信息（如果失败）
        """
        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "bucket": bucket,
            "object_path": object_path,
            "local_path": local_path,
            "file_size": file_size,
            "duration": duration,
            "status": status,
            "error_msg": error_msg
        }

        log_file = os.path.join(self.log_path, f'upload_{self.today}.jsonl')

        with self.lock:
            with open(log_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(log_entry, ensure_ascii=False) + '\n')

            if status == "success":
                self.success_uploads += 1
            else:
                self.failed_uploads += 1
                self.failed_list.append({
                    "bucket": bucket,
                    "object_path": object_path,
                    "error_msg": error_msg
                })

    def get_summary(self):
        """
        Returns:
            dict: 成功数、失败数和失败清单
        """
        with self.lock:
            return {
                "date": self.today,
                "success": self.success_uploads,
                "failed": self.failed_uploads,
                "failed_list": list(self.failed_list)
            }


# 单例模式
upload_logger = UploadLogger()
