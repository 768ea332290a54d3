"""User-facing strings, one catalog per supported locale."""

DEFAULT_LOCALE = "zh-TW"

_CATALOG: dict[str, dict[str, str]] = {
    "zh-TW": {
        "invalid_api_key": "API 金鑰無效或已過期，請檢查您的設定",
        "quota_exceeded": "已達到 API 使用配額限制，請稍後再試",
        "network_error": "網路連線發生問題，請檢查您的網路連線",
        "api_error": "API 請求失敗：{detail}",
        "audio_decode_error": "音訊檔案格式不支援或已損壞，請上傳有效的音訊檔案",
        "unknown_error": "發生未知錯誤，請稍後再試",
        "invalid_chunk_duration": "片段長度 {seconds} 秒太短，無法分割此音訊",
        "chunk_failed": "[轉錄此片段時發生錯誤 ({chunk_number}): {message}]",
        "decoding": "正在解碼音訊檔案 (這可能需要一點時間)...",
        "splitting": "正在分割音訊...",
        "ready": "準備開始轉錄...",
        "resuming": "從上次進度繼續...",
        "transcribing": "正在轉錄第 {chunk_number} / {total_chunks} 個片段...",
        "completed": "完成！",
        "stopped": "已停止，進度已保存",
    },
    "en": {
        "invalid_api_key": "The API key is invalid or has expired. Please check your settings.",
        "quota_exceeded": "The API usage quota has been reached. Please try again later.",
        "network_error": "A network problem occurred. Please check your connection.",
        "api_error": "API request failed: {detail}",
        "audio_decode_error": "The audio file format is unsupported or the file is damaged. Please provide a valid audio file.",
        "unknown_error": "An unknown error occurred. Please try again later.",
        "invalid_chunk_duration": "A chunk length of {seconds}s is too short to split this audio.",
        "chunk_failed": "[Error transcribing chunk ({chunk_number}): {message}]",
        "decoding": "Decoding audio file (this may take a while)...",
        "splitting": "Splitting audio...",
        "ready": "Ready to transcribe...",
        "resuming": "Resuming from saved progress...",
        "transcribing": "Transcribing chunk {chunk_number} / {total_chunks}...",
        "completed": "Done!",
        "stopped": "Stopped, progress saved",
    },
}


def message(key: str, locale: str = DEFAULT_LOCALE, **params) -> str:
    """Looks up a localized message, falling back to the default locale."""
    catalog = _CATALOG.get(locale, _CATALOG[DEFAULT_LOCALE])
    return catalog[key].format(**params)
