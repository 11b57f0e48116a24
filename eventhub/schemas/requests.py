from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterIn(BaseModel):
    name: str = Field(..., description="Display name", min_length=1, max_length=120)
    email: EmailStr = Field(..., description="The email of the user", max_length=255)
    password: str = Field(..., description="The password of the user", min_length=6)


class LoginIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1)
    remember_me: bool = Field(False, alias="rememberMe")


class VerifyOtpIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr = Field(..., max_length=255)
    otp_code: str = Field(..., alias="otpCode", min_length=1, max_length=16)


class ForgotPasswordIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)


class ResetPasswordIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr = Field(..., max_length=255)
    otp_code: str = Field(..., alias="otpCode", min_length=1, max_length=16)
    new_password: str = Field(..., alias="newPassword", min_length=8)
